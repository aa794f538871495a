# Overview: Drains the sync queue against the remote service when connectivity returns.

"""
Reconciler.

Best-effort, at-least-once replay:
- Items are attempted in enqueue order.
- A confirmed item is removed; a failed or timed-out item stays queued with
  its attempt counter bumped, and the sweep moves on to the next item.
- A sweep is never re-run automatically after partial failure. The next
  "became online" edge or a manual trigger starts another one.
- Only one sweep runs at a time; a second request while one is running is
  reported as skipped.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass

from flask import current_app

from . import sync_queue
from .remote_client import RemoteDeliveryFailure


@dataclass
class DrainResult:
    delivered: int = 0
    failed: int = 0
    remaining: int = 0
    skipped: bool = False
    reason: str | None = None

    def to_dict(self) -> dict:
        return {
            "delivered": self.delivered,
            "failed": self.failed,
            "remaining": self.remaining,
            "skipped": self.skipped,
            "reason": self.reason,
        }


class Reconciler:
    def __init__(self, app, context):
        self._app = app
        self._context = context
        self._drain_lock = threading.Lock()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._drain_lock.locked()

    def drain(self) -> DrainResult:
        """Run one sweep in the caller's thread. Requires an app context."""
        if not self._drain_lock.acquire(blocking=False):
            return DrainResult(skipped=True, reason="drain already running")
        try:
            return self._drain_locked()
        finally:
            self._drain_lock.release()

    def _drain_locked(self) -> DrainResult:
        ctx = self._context
        log = current_app.logger

        if ctx.remote is None:
            return DrainResult(skipped=True, reason="no remote configured", remaining=sync_queue.count_pending())
        if not ctx.connectivity.online:
            return DrainResult(skipped=True, reason="offline", remaining=sync_queue.count_pending())

        pending = sync_queue.list_pending()
        result = DrainResult()
        if not pending:
            return result

        log.info("Sync drain started: %d pending mutation(s)", len(pending))
        for item in pending:
            if not ctx.connectivity.online:
                log.info("Went offline mid-drain; stopping sweep")
                break
            try:
                ctx.remote.deliver(item.collection, item.operation, item.payload, item.idempotency_key)
            except RemoteDeliveryFailure as exc:
                result.failed += 1
                log.warning(
                    "Sync drain: mutation %d (%s %s) not delivered: %s",
                    item.sequence_id, item.operation, item.collection, exc,
                )
                with ctx.locks.hold("sync_queue"):
                    sync_queue.record_failure(item.sequence_id, str(exc))
                continue

            # An immediate dispatch may already have removed it
            with ctx.locks.hold("sync_queue"):
                sync_queue.remove(item.sequence_id, missing_ok=True)
            result.delivered += 1

        result.remaining = sync_queue.count_pending()
        log.info(
            "Sync drain finished: delivered=%d failed=%d remaining=%d",
            result.delivered, result.failed, result.remaining,
        )
        return result

    def trigger(self) -> threading.Thread:
        """Run a sweep on a background thread with its own app context."""
        app = self._app

        def _run():
            with app.app_context():
                try:
                    self.drain()
                except Exception:
                    current_app.logger.exception("Background sync drain failed")

        thread = threading.Thread(target=_run, name="dokan-sync-drain", daemon=True)
        self._thread = thread
        thread.start()
        return thread

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)
