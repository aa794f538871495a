from __future__ import annotations

from ..extensions import db
from dokan.time_utils import to_utc_z, parse_iso_datetime


class ExpenseRecord(db.Model):
    """Shop expense (rent, utilities, wages). Created and deleted independently of sales."""
    __tablename__ = "expenses"

    id = db.Column(db.String(32), primary_key=True)
    description = db.Column(db.String(255), nullable=False)
    amount_cents = db.Column(db.Integer, nullable=False)
    category = db.Column(db.String(64), nullable=False, default="General", index=True)
    date = db.Column(db.DateTime(timezone=True), nullable=False, index=True)

    WRITABLE_FIELDS = {"id", "description", "amount_cents", "category", "date"}

    @classmethod
    def from_dict(cls, data: dict) -> "ExpenseRecord":
        expense = cls(id=data["id"])
        expense.apply(data)
        return expense

    def apply(self, data: dict) -> None:
        for key, value in data.items():
            if key not in self.WRITABLE_FIELDS or key == "id":
                continue
            if key == "date" and isinstance(value, str):
                value = parse_iso_datetime(value)
            setattr(self, key, value)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "description": self.description,
            "amount_cents": self.amount_cents,
            "category": self.category,
            "date": to_utc_z(self.date),
        }
