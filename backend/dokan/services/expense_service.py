# Overview: Service-layer operations for shop expenses.

from __future__ import annotations

from ..extensions import db
from ..models import ExpenseRecord
from ..validation import (
    ModelValidationPolicy,
    enforce_rules_expense,
    validate_payload,
)
from .store_service import store_errors
from . import store_service, mutation_service
from dokan.time_utils import utcnow


EXPENSE_POLICY = ModelValidationPolicy(
    writable_fields={"description", "amount_cents", "category", "date"},
    required_on_create={"description", "amount_cents"},
)


def list_expenses() -> list[ExpenseRecord]:
    """Newest first."""
    return store_service.list_ordered("expenses", "date", ascending=False)


def total_expenses_cents() -> int:
    with store_errors():
        return int(db.session.query(db.func.coalesce(db.func.sum(ExpenseRecord.amount_cents), 0)).scalar())


def add_expense(patch: dict) -> ExpenseRecord:
    cleaned = validate_payload(model=ExpenseRecord, payload=patch, policy=EXPENSE_POLICY, partial=False)
    enforce_rules_expense(cleaned)
    record = {
        **cleaned,
        "category": cleaned.get("category") or "General",
        "date": cleaned.get("date") or utcnow(),
    }

    def _write():
        record["id"] = store_service.next_time_id("expenses")
        return store_service.put("expenses", record)

    return mutation_service.execute("expenses", "create", None, _write)


def delete_expense(expense_id: str) -> None:
    mutation_service.execute(
        "expenses", "delete", {"id": expense_id}, lambda: store_service.delete("expenses", expense_id)
    )
