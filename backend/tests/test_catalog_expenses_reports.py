from datetime import datetime
from decimal import Decimal

import pytest

from dokan.services import (
    catalog_service,
    checkout_service,
    expense_service,
    reporting_service,
    store_service,
    sync_queue,
)
from dokan.validation import NotFoundError, ValidationError


# --- catalog -------------------------------------------------------------

def test_create_item_fills_defaults_and_time_id(app):
    item = catalog_service.create_item({})

    assert item.name == "New Product"
    assert item.name_bn == "New Product"
    assert item.category == "General"
    assert item.unit == "pcs"
    assert item.stock == Decimal("0")
    assert item.id.isdigit()


def test_create_item_rejects_negative_stock(app):
    with pytest.raises(ValidationError):
        catalog_service.create_item({"name": "Eggs", "stock": "-1"})


def test_create_item_rejects_stock_finer_than_three_places(app):
    with pytest.raises(ValidationError, match="at most 3 decimal places"):
        catalog_service.create_item({"name": "Eggs", "stock": "1.2345"})
    assert sync_queue.count_pending() == 0

    item = catalog_service.create_item({"name": "Eggs", "stock": "1.234"})
    assert item.stock == Decimal("1.234")
    assert sync_queue.list_pending()[0].payload["stock"] == "1.234"


def test_update_item(app, items):
    item = catalog_service.update_item("B", {"price_cents": 55, "stock": "12.5"})

    assert item.price_cents == 55
    assert item.stock == Decimal("12.5")
    assert sync_queue.list_pending()[0].payload["stock"] == "12.5"


def test_update_item_cannot_change_id(app, items):
    with pytest.raises(ValidationError):
        catalog_service.update_item("A", {"id": "Z"})


def test_update_missing_item(app):
    with pytest.raises(NotFoundError):
        catalog_service.update_item("ghost", {"price_cents": 1})
    assert sync_queue.count_pending() == 0


def test_delete_item_queues_delete(app, items):
    catalog_service.delete_item("A")

    assert store_service.find("catalog", "A") is None
    [queued] = sync_queue.list_pending()
    assert (queued.operation, queued.payload) == ("delete", {"id": "A"})


def test_list_items_search_and_category(app, items):
    assert [i.id for i in catalog_service.list_items()] == ["A", "B"]
    assert [i.id for i in catalog_service.list_items(category="Toiletries")] == ["B"]
    assert [i.id for i in catalog_service.list_items(search="ric")] == ["A"]
    assert [i.id for i in catalog_service.list_items(search="সাবান")] == ["B"]


def test_low_stock_items(app, items):
    assert [i.id for i in catalog_service.low_stock_items()] == ["B", "A"]
    assert [i.id for i in catalog_service.low_stock_items(threshold=4)] == ["B"]
    assert catalog_service.low_stock_items(threshold=3) == []


def test_seed_only_fills_empty_catalog(app):
    assert catalog_service.seed_catalog() == len(catalog_service.STARTER_ITEMS)
    assert catalog_service.seed_catalog() == 0
    assert store_service.get("catalog", "1").unit == "kg"


# --- expenses ------------------------------------------------------------

def test_add_and_delete_expense(app):
    rent = expense_service.add_expense({"description": "Rent", "amount_cents": 500000, "category": "Rent"})
    tea = expense_service.add_expense({"description": "Tea", "amount_cents": 2000})

    assert tea.category == "General"
    assert expense_service.total_expenses_cents() == 502000
    assert {e.id for e in expense_service.list_expenses()} == {rent.id, tea.id}

    expense_service.delete_expense(rent.id)
    assert expense_service.total_expenses_cents() == 2000
    assert [m.operation for m in sync_queue.list_pending()] == ["create", "create", "delete"]


@pytest.mark.parametrize("payload", [
    {"description": "Rent"},
    {"description": "Rent", "amount_cents": 0},
    {"description": "Rent", "amount_cents": -10},
    {"description": "Rent", "amount_cents": "12.50"},
    {"description": "", "amount_cents": 100},
])
def test_add_expense_validation(app, payload):
    with pytest.raises(ValidationError):
        expense_service.add_expense(payload)


def test_expense_date_accepts_iso_string(app):
    expense = expense_service.add_expense({
        "description": "Electricity", "amount_cents": 150000, "date": "2025-03-05T10:00:00Z",
    })
    assert expense.to_dict()["date"] == "2025-03-05T10:00:00.000Z"


# --- reports -------------------------------------------------------------

def test_dashboard_summary(app, items):
    checkout_service.checkout([("A", 2), ("B", 1)])
    checkout_service.checkout([("B", 1)], paid_cents=0, customer_name="Rahim")
    expense_service.add_expense({"description": "Tea", "amount_cents": 30})

    summary = reporting_service.dashboard_summary()
    assert summary["order_count"] == 2
    assert summary["total_sales_cents"] == 300
    assert summary["gross_profit_cents"] == 100
    assert summary["total_due_cents"] == 50
    assert summary["total_expenses_cents"] == 30
    assert summary["net_profit_cents"] == 70
    assert summary["low_stock_count"] == 2


def test_due_sales(app, items):
    checkout_service.checkout([("A", 1)])
    owed = checkout_service.checkout([("A", 1)], paid_cents=40, customer_name="Karim")

    dues = reporting_service.due_sales()
    assert dues["count"] == 1
    assert dues["total_due_cents"] == 60
    assert dues["items"][0]["id"] == owed.id


def test_monthly_summary_bounds(app):
    store_service.put("expenses", {
        "id": "e1", "description": "Jan rent", "amount_cents": 100, "date": datetime(2025, 1, 31, 23, 59),
    })
    store_service.put("expenses", {
        "id": "e2", "description": "Feb rent", "amount_cents": 200, "date": datetime(2025, 2, 1),
    })

    jan = reporting_service.monthly_summary(2025, 1)
    assert jan["total_expenses_cents"] == 100
    assert jan["net_profit_cents"] == -100
    assert reporting_service.monthly_summary(2025, 2)["total_expenses_cents"] == 200
    assert reporting_service.month_bounds(2024, 12)[1] == datetime(2025, 1, 1)

    with pytest.raises(ValidationError):
        reporting_service.monthly_summary(2025, 13)
