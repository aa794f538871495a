from dokan.services import store_service, sync_queue


def test_system_init_and_catalog_seed(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=['system', 'init'])
    assert result.exit_code == 0
    assert 'Local store initialized' in result.output

    result = runner.invoke(args=['catalog', 'seed'])
    assert result.exit_code == 0
    assert 'Seeded 5 catalog items' in result.output
    assert store_service.get('catalog', '2').name == 'Soybean Oil'

    result = runner.invoke(args=['catalog', 'seed'])
    assert 'skipping seed' in result.output


def test_users_create(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=[
        'users', 'create', '--store-name', 'Amar Dokan', '--username', 'owner', '--pin', '1234',
    ])
    assert result.exit_code == 0
    assert 'Created user: owner' in result.output

    result = runner.invoke(args=[
        'users', 'create', '--store-name', 'Amar Dokan', '--username', 'owner', '--pin', '1234',
    ])
    assert result.exit_code != 0
    assert 'already exists' in result.output


def test_sync_status_and_drain(app, remote):
    remote.status_code = 503
    sync_queue.enqueue('catalog', 'update', {'id': 'A'})
    runner = app.test_cli_runner()

    result = runner.invoke(args=['sync', 'status'])
    assert 'Pending mutations: 1' in result.output

    remote.status_code = 200
    result = runner.invoke(args=['sync', 'drain'])
    assert 'Delivered 1, failed 0, remaining 0' in result.output
    assert sync_queue.count_pending() == 0
