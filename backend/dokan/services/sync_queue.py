# Overview: Durable sync queue; mutations applied locally but not yet confirmed by the remote service.

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime

from ..extensions import db
from ..models import QueuedMutation
from ..validation import NotFoundError, ValidationError
from .store_service import store_errors, finish_write
from dokan.time_utils import utcnow


OPERATIONS = ("create", "update", "delete")


@dataclass(frozen=True)
class PendingMutation:
    """Detached snapshot of a queue row, safe to hand across threads."""
    sequence_id: int
    collection: str
    operation: str
    payload: dict
    idempotency_key: str
    enqueued_at: datetime
    attempts: int = 0

    @classmethod
    def from_model(cls, row: QueuedMutation) -> "PendingMutation":
        return cls(
            sequence_id=row.id,
            collection=row.collection,
            operation=row.operation,
            payload=row.payload,
            idempotency_key=row.idempotency_key,
            enqueued_at=row.enqueued_at,
            attempts=row.attempts or 0,
        )


def enqueue(
    collection: str,
    operation: str,
    payload: dict,
    *,
    idempotency_key: str | None = None,
) -> PendingMutation:
    """
    Append a mutation. The sequence id is assigned by the store and is
    strictly greater than every id handed out before, deleted or not.

    No deduplication: the same logical change may be queued twice.
    """
    if operation not in OPERATIONS:
        raise ValidationError(f"Unsupported operation: {operation}")
    if not isinstance(payload, dict):
        raise ValidationError("payload must be a dict")

    row = QueuedMutation(
        collection=collection,
        operation=operation,
        payload=payload,
        idempotency_key=idempotency_key or uuid.uuid4().hex,
        enqueued_at=utcnow(),
        attempts=0,
    )
    db.session.add(row)
    with store_errors():
        db.session.flush()  # assigns row.id
    pending = PendingMutation.from_model(row)
    finish_write()
    return pending


def list_pending(limit: int | None = None) -> list[PendingMutation]:
    """All queued mutations, oldest first."""
    query = db.session.query(QueuedMutation).order_by(QueuedMutation.id.asc())
    if limit is not None:
        query = query.limit(limit)
    with store_errors():
        return [PendingMutation.from_model(row) for row in query.all()]


def count_pending() -> int:
    with store_errors():
        return db.session.query(QueuedMutation).count()


def remove(sequence_id: int, *, missing_ok: bool = False) -> None:
    """Delete a confirmed mutation."""
    with store_errors():
        row = db.session.get(QueuedMutation, sequence_id)
    if row is None:
        if missing_ok:
            return
        raise NotFoundError(f"Queued mutation {sequence_id} not found")
    db.session.delete(row)
    finish_write()


def record_failure(sequence_id: int, error: str) -> None:
    """Bump the attempt counter on a failed delivery; the row stays queued."""
    with store_errors():
        row = db.session.get(QueuedMutation, sequence_id)
    if row is None:
        return
    row.attempts = (row.attempts or 0) + 1
    row.last_attempt_at = utcnow()
    row.last_error = (error or "")[:255]
    finish_write()


def status() -> dict:
    with store_errors():
        oldest = db.session.query(QueuedMutation).order_by(QueuedMutation.id.asc()).first()
    return {
        "pending": count_pending(),
        "oldest": oldest.to_dict() if oldest else None,
    }
