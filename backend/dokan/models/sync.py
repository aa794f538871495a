from __future__ import annotations

from ..extensions import db
from dokan.time_utils import to_utc_z


class QueuedMutation(db.Model):
    """
    A local mutation not yet confirmed by the remote service.

    Ids come from AUTOINCREMENT so they strictly increase and are never
    reused after a delete; ordering by id is enqueue order.
    """
    __tablename__ = "sync_queue"
    __table_args__ = (
        db.Index("ix_sync_queue_collection_enqueued", "collection", "enqueued_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    collection = db.Column(db.String(32), nullable=False)
    operation = db.Column(db.String(16), nullable=False)  # create, update, delete
    payload = db.Column(db.JSON, nullable=False)

    # Sent as the Idempotency-Key header so the remote can drop replays
    idempotency_key = db.Column(db.String(32), nullable=False, unique=True)

    enqueued_at = db.Column(db.DateTime(timezone=True), nullable=False, index=True)

    attempts = db.Column(db.Integer, nullable=False, default=0)
    last_attempt_at = db.Column(db.DateTime(timezone=True), nullable=True)
    last_error = db.Column(db.String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<QueuedMutation id={self.id} {self.operation} {self.collection}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "collection": self.collection,
            "operation": self.operation,
            "payload": self.payload,
            "idempotency_key": self.idempotency_key,
            "enqueued_at": to_utc_z(self.enqueued_at),
            "attempts": self.attempts,
            "last_attempt_at": to_utc_z(self.last_attempt_at),
            "last_error": self.last_error,
        }
