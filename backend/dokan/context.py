# Overview: Per-app handle bundling connectivity, remote client, reconciler, session and writer locks.

from __future__ import annotations

from dataclasses import dataclass, field

from flask import Flask, current_app

from .services.concurrency import CollectionLocks
from .services.connectivity import ConnectivityState
from .services.reconciler import Reconciler
from .services.remote_client import RemoteClient
from .services.session_service import LocalSession

EXTENSION_KEY = "dokan"


@dataclass
class DokanContext:
    """
    Everything the data layer needs besides the database session.

    Lives in app.extensions so there is exactly one per app, created in
    create_app and torn down with it. Services reach it through
    get_context() instead of module-level globals.
    """
    connectivity: ConnectivityState
    remote: RemoteClient | None = None
    session: LocalSession = field(default_factory=LocalSession)
    locks: CollectionLocks = field(default_factory=CollectionLocks)
    reconciler: Reconciler | None = None


def init_context(app: Flask) -> DokanContext:
    remote = None
    if app.config.get("REMOTE_SYNC_URL"):
        remote = RemoteClient(
            app.config["REMOTE_SYNC_URL"],
            timeout=app.config.get("REMOTE_SYNC_TIMEOUT", 5.0),
        )

    ctx = DokanContext(
        connectivity=ConnectivityState(online=app.config.get("START_ONLINE", True)),
        remote=remote,
    )
    ctx.reconciler = Reconciler(app, ctx)

    if app.config.get("SYNC_DRAIN_ON_RECONNECT", True):
        ctx.connectivity.on_restored(ctx.reconciler.trigger)

    app.extensions[EXTENSION_KEY] = ctx
    return ctx


def get_context() -> DokanContext:
    return current_app.extensions[EXTENSION_KEY]
