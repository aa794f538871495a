# Overview: Mutation executor; applies a local write and hands the change to the remote or the sync queue.

"""
Mutation executor.

Durable first, eventually consistent:
1. The local write and the queue entry describing it are committed in ONE
   store transaction. If the write fails nothing is queued and the error
   reaches the caller (ValidationError, ConflictError, StoreUnavailable).
2. If online, each queued entry is delivered right away with the remote
   client's bounded timeout. Confirmed entries are removed; anything else
   stays queued for the reconciler. Remote failure is logged, never raised.

Because the queue row commits with the data it describes, a crash between
the write and the delivery attempt leaves a queued mutation, not a lost one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable

from flask import current_app

from . import store_service, sync_queue
from .concurrency import run_with_retry
from .remote_client import RemoteDeliveryFailure
from .sync_queue import PendingMutation
from ..context import get_context


@dataclass(frozen=True)
class Mutation:
    collection: str
    operation: str
    payload: dict


def execute(
    collection: str,
    operation: str,
    payload: dict | None,
    local_write: Callable[[], Any],
) -> Any:
    """
    Apply one logical change. Returns whatever local_write returns.

    When payload is None it is taken from the written record's to_dict(),
    so the queued snapshot carries store-assigned values.
    """
    def _unit():
        result = local_write()
        body = payload if payload is not None else result.to_dict()
        return result, [Mutation(collection, operation, body)]

    return execute_unit([collection], _unit)


def execute_unit(
    collections: Iterable[str],
    local_write: Callable[[], tuple[Any, list[Mutation]]],
) -> Any:
    """
    Apply a composite change touching several collections atomically.

    local_write returns (result, mutations); every mutation is queued in the
    same transaction as the writes, then dispatched.
    """
    ctx = get_context()

    def _op():
        with store_service.transaction():
            result, mutations = local_write()
            pending = [
                sync_queue.enqueue(m.collection, m.operation, m.payload)
                for m in mutations
            ]
        return result, pending

    with ctx.locks.hold(*collections):
        result, pending = run_with_retry(_op)

    dispatch(pending)
    return result


def dispatch(pending: list[PendingMutation]) -> int:
    """
    Try to deliver already-queued mutations now. Returns how many were confirmed.

    Stops at the first failure: the remote is unreachable or rejecting, and
    each further attempt could wait out the full timeout on the caller's
    thread. Whatever is left stays queued for the reconciler.
    """
    ctx = get_context()
    log = current_app.logger

    if not pending:
        return 0
    if ctx.remote is None or not ctx.connectivity.online:
        log.info("Offline or no remote: %d mutation(s) left in sync queue", len(pending))
        return 0

    delivered = 0
    for position, item in enumerate(pending):
        try:
            ctx.remote.deliver(item.collection, item.operation, item.payload, item.idempotency_key)
        except RemoteDeliveryFailure as exc:
            log.warning(
                "Delivery of %s %s failed, keeping queued mutation %d: %s",
                item.operation, item.collection, item.sequence_id, exc,
            )
            with ctx.locks.hold("sync_queue"):
                sync_queue.record_failure(item.sequence_id, str(exc))
            remaining = len(pending) - position - 1
            if remaining:
                log.info("Leaving %d further mutation(s) for the reconciler", remaining)
            break

        with ctx.locks.hold("sync_queue"):
            sync_queue.remove(item.sequence_id, missing_ok=True)
        delivered += 1

    return delivered
