# Overview: Read-only reporting over sales and expenses; dashboard, due list and monthly summary.

from __future__ import annotations

from datetime import datetime

from flask import current_app
from sqlalchemy import func

from dokan.extensions import db
from dokan.models import SaleRecord, ExpenseRecord, CatalogItem
from dokan.validation import ValidationError
from .store_service import store_errors


def _sale_sums(start: datetime | None = None, end: datetime | None = None) -> dict:
    query = db.session.query(
        func.count(SaleRecord.id),
        func.coalesce(func.sum(SaleRecord.total_cents), 0),
        func.coalesce(func.sum(SaleRecord.profit_cents), 0),
        func.coalesce(func.sum(SaleRecord.due_cents), 0),
    )
    if start is not None:
        query = query.filter(SaleRecord.date >= start)
    if end is not None:
        query = query.filter(SaleRecord.date < end)
    with store_errors():
        count, total, profit, due = query.one()
    return {
        "order_count": int(count),
        "total_sales_cents": int(total),
        "gross_profit_cents": int(profit),
        "total_due_cents": int(due),
    }


def _expense_sum(start: datetime | None = None, end: datetime | None = None) -> int:
    query = db.session.query(func.coalesce(func.sum(ExpenseRecord.amount_cents), 0))
    if start is not None:
        query = query.filter(ExpenseRecord.date >= start)
    if end is not None:
        query = query.filter(ExpenseRecord.date < end)
    with store_errors():
        return int(query.scalar())


def dashboard_summary() -> dict:
    """
    All-time figures for the dashboard cards.

    net_profit = gross profit - expenses. Low stock uses LOW_STOCK_THRESHOLD.
    """
    threshold = current_app.config.get("LOW_STOCK_THRESHOLD", 10)
    summary = _sale_sums()
    summary["total_expenses_cents"] = _expense_sum()
    summary["net_profit_cents"] = summary["gross_profit_cents"] - summary["total_expenses_cents"]
    with store_errors():
        summary["low_stock_count"] = (
            db.session.query(CatalogItem).filter(CatalogItem.stock < threshold).count()
        )
    return summary


def due_sales() -> dict:
    """Sales with an outstanding balance, newest first."""
    with store_errors():
        sales = (
            db.session.query(SaleRecord)
            .filter(SaleRecord.due_cents > 0)
            .order_by(SaleRecord.date.desc(), SaleRecord.id.desc())
            .all()
        )
    return {
        "items": [s.to_dict() for s in sales],
        "count": len(sales),
        "total_due_cents": sum(s.due_cents for s in sales),
    }


def month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    if not 1 <= month <= 12:
        raise ValidationError("month must be between 1 and 12")
    start = datetime(year, month, 1)
    end = datetime(year + 1, 1, 1) if month == 12 else datetime(year, month + 1, 1)
    return start, end


def monthly_summary(year: int, month: int) -> dict:
    """Totals for one calendar month (UTC), the basis of the monthly report export."""
    start, end = month_bounds(year, month)
    summary = _sale_sums(start, end)
    summary["total_expenses_cents"] = _expense_sum(start, end)
    summary["net_profit_cents"] = summary["gross_profit_cents"] - summary["total_expenses_cents"]
    summary["year"] = year
    summary["month"] = month
    return summary
