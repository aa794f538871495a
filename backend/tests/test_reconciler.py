from dokan.context import get_context
from dokan.services import catalog_service, sync_queue


def _queue(n):
    return [
        sync_queue.enqueue("catalog", "update", {"id": str(i), "stock": str(i)}).sequence_id
        for i in range(n)
    ]


def test_drain_delivers_everything_in_order(app, remote):
    _queue(4)

    result = get_context().reconciler.drain()

    assert result.to_dict() == {
        "delivered": 4, "failed": 0, "remaining": 0, "skipped": False, "reason": None,
    }
    assert sync_queue.list_pending() == []
    assert [m["payload"]["id"] for m in remote.received] == ["0", "1", "2", "3"]


def test_drain_with_every_delivery_failing_keeps_items_in_order(app, remote):
    ids = _queue(3)
    remote.status_code = 503

    result = get_context().reconciler.drain()

    assert result.failed == 3
    assert result.delivered == 0
    assert result.remaining == 3
    pending = sync_queue.list_pending()
    assert [m.sequence_id for m in pending] == ids
    assert all(m.attempts == 1 for m in pending)


def test_one_stuck_item_does_not_block_the_rest(app, remote):
    ids = _queue(3)
    remote.reject_ids = {"1"}

    result = get_context().reconciler.drain()

    assert result.delivered == 2
    assert result.failed == 1
    assert [m.sequence_id for m in sync_queue.list_pending()] == [ids[1]]


def test_drain_skipped_while_offline(app, remote, offline):
    _queue(2)

    result = get_context().reconciler.drain()

    assert result.skipped is True
    assert result.reason == "offline"
    assert result.remaining == 2
    assert remote.calls == 0


def test_drain_skipped_without_remote(app):
    _queue(1)
    result = get_context().reconciler.drain()
    assert result.skipped is True
    assert result.reason == "no remote configured"


def test_drain_on_empty_queue(app, remote):
    result = get_context().reconciler.drain()
    assert result.delivered == 0
    assert result.remaining == 0
    assert remote.calls == 0


def test_reconnect_edge_drains_in_background(app, remote, offline):
    catalog_service.create_item({"id": "A", "name": "Rice"})
    catalog_service.create_item({"id": "B", "name": "Soap"})
    assert sync_queue.count_pending() == 2

    ctx = get_context()
    assert ctx.connectivity.set_online(True) is True
    ctx.reconciler.join(timeout=5)

    assert sync_queue.count_pending() == 0
    assert [m["payload"]["id"] for m in remote.received] == ["A", "B"]


def test_repeated_online_reports_do_not_retrigger(app, remote):
    ctx = get_context()
    _queue(1)

    assert ctx.connectivity.set_online(True) is False
    assert remote.calls == 0
    assert sync_queue.count_pending() == 1


def test_partial_failure_is_not_retried_until_next_edge(app, remote, offline):
    _queue(2)
    remote.status_code = 503
    ctx = get_context()

    ctx.connectivity.set_online(True)
    ctx.reconciler.join(timeout=5)
    assert remote.calls == 2
    assert sync_queue.count_pending() == 2

    remote.status_code = 200
    ctx.connectivity.set_online(False)
    ctx.connectivity.set_online(True)
    ctx.reconciler.join(timeout=5)
    assert remote.calls == 4
    assert sync_queue.count_pending() == 0
