# Overview: Flask CLI command groups for bootstrap, catalog seeding, accounts and sync.

# backend/dokan/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP (PowerShell: $env:FLASK_APP="dokan:create_app").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init
#   Create all tables (idempotent). Use `flask db upgrade` for migrated installs.
#
# Catalog:
# - python -m flask catalog seed
#   Load starter products into an empty catalog.
# - python -m flask catalog low-stock [--threshold 10]
#   List items below the low-stock threshold.
#
# Accounts:
# - python -m flask users create --store-name "Amar Dokan" --username owner --pin 1234
#   Register the shop account (prompts if options are omitted).
#
# Sync:
# - python -m flask sync status
#   Show pending mutation count and the oldest queued entry.
# - python -m flask sync drain
#   Replay the queue against REMOTE_SYNC_URL now.

import click
from flask.cli import with_appcontext

from .extensions import db
from .context import get_context
from .services import auth_service, catalog_service, sync_queue
from .validation import ConflictError, ValidationError


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """Create the local store's tables if they do not exist."""
    db.create_all()
    click.echo("PASS Local store initialized")


@click.group('catalog')
def catalog_group():
    """Catalog maintenance commands."""


@catalog_group.command('seed')
@with_appcontext
def seed_catalog():
    """Load starter products into an empty catalog."""
    created = catalog_service.seed_catalog()
    if created:
        click.echo(f"PASS Seeded {created} catalog items")
    else:
        click.echo("WARN  Catalog is not empty, skipping seed")


@catalog_group.command('low-stock')
@click.option('--threshold', type=int, default=None, help='Stock level below which an item is listed')
@with_appcontext
def low_stock(threshold):
    """List items running low."""
    items = catalog_service.low_stock_items(threshold)
    if not items:
        click.echo("No low-stock items")
        return
    for item in items:
        click.echo(f"{item.id:<16} {item.name:<32} {item.to_dict()['stock']} {item.unit}")


@click.group('users')
def users_group():
    """Shop account commands."""


@users_group.command('create')
@click.option('--store-name', prompt=True)
@click.option('--username', prompt=True)
@click.option('--pin', prompt=True, hide_input=True, confirmation_prompt=True)
@click.option('--address', default=None)
@click.option('--phone', default=None)
@with_appcontext
def create_user(store_name, username, pin, address, phone):
    """Register the shop account."""
    try:
        user = auth_service.register_user(store_name, username, pin, address=address, phone=phone)
    except (ValidationError, ConflictError) as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Created user: {user.username} ({user.store_name})")


@click.group('sync')
def sync_group():
    """Sync queue inspection and replay."""


@sync_group.command('status')
@with_appcontext
def sync_status():
    """Show the sync backlog."""
    status = sync_queue.status()
    click.echo(f"Online: {get_context().connectivity.online}")
    click.echo(f"Pending mutations: {status['pending']}")
    oldest = status["oldest"]
    if oldest:
        click.echo(
            f"Oldest: #{oldest['id']} {oldest['operation']} {oldest['collection']} "
            f"queued {oldest['enqueued_at']} attempts={oldest['attempts']}"
        )


@sync_group.command('drain')
@with_appcontext
def sync_drain():
    """Replay queued mutations against the remote now."""
    result = get_context().reconciler.drain()
    if result.skipped:
        click.echo(f"WARN  Drain skipped: {result.reason}")
        return
    click.echo(
        f"PASS Delivered {result.delivered}, failed {result.failed}, remaining {result.remaining}"
    )


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(catalog_group)
    app.cli.add_command(users_group)
    app.cli.add_command(sync_group)
