# backend/dokan/services/catalog_service.py
"""
Catalog Service

Inventory edits made from the back office. Every write goes through the
mutation executor so it is queued for the remote when it cannot be
delivered right away. Checkout stock decrements live in checkout_service.
"""
from __future__ import annotations

from decimal import Decimal

from flask import current_app

from ..extensions import db
from ..models import CatalogItem
from ..validation import (
    ConflictError,
    ModelValidationPolicy,
    ValidationError,
    enforce_rules_catalog_item,
    validate_payload,
)
from .store_service import store_errors
from . import store_service, mutation_service


CATALOG_POLICY = ModelValidationPolicy(
    writable_fields={"id", "name", "name_bn", "category", "price_cents", "cost_cents", "stock", "unit", "image"},
    required_on_create=set(),
)

# Starter products for an empty till
STARTER_ITEMS = [
    {"id": "1", "name": "Rice (Miniket)", "name_bn": "চাল (মিনিকেট)", "category": "Grocery",
     "price_cents": 7500, "cost_cents": 6800, "stock": "100", "unit": "kg"},
    {"id": "2", "name": "Soybean Oil", "name_bn": "সয়াবিন তেল", "category": "Grocery",
     "price_cents": 18500, "cost_cents": 17000, "stock": "50", "unit": "L"},
    {"id": "3", "name": "Red Lentils", "name_bn": "মসুর ডাল", "category": "Grocery",
     "price_cents": 13000, "cost_cents": 11500, "stock": "40", "unit": "kg"},
    {"id": "4", "name": "Sugar", "name_bn": "চিনি", "category": "Grocery",
     "price_cents": 14000, "cost_cents": 12500, "stock": "30", "unit": "kg"},
    {"id": "5", "name": "Bath Soap", "name_bn": "সাবান", "category": "Toiletries",
     "price_cents": 6000, "cost_cents": 4800, "stock": "24", "unit": "pcs"},
]


def _with_defaults(patch: dict) -> dict:
    """Fill the blanks the counter form leaves empty."""
    record = dict(patch)
    record["name"] = record.get("name") or "New Product"
    record["name_bn"] = record.get("name_bn") or record["name"]
    record["category"] = record.get("category") or "General"
    record["unit"] = record.get("unit") or "pcs"
    record.setdefault("price_cents", 0)
    record.setdefault("cost_cents", 0)
    record.setdefault("stock", Decimal("0"))
    return record


def get_item(item_id: str) -> CatalogItem:
    return store_service.get("catalog", item_id)


def list_items(category: str | None = None, search: str | None = None) -> list[CatalogItem]:
    """Catalog ordered by name; optional category filter and name search (either locale)."""
    query = db.session.query(CatalogItem)
    if category:
        query = query.filter(CatalogItem.category == category)
    if search:
        needle = f"%{search.strip()}%"
        query = query.filter(
            db.or_(CatalogItem.name.ilike(needle), CatalogItem.name_bn.like(needle))
        )
    query = query.order_by(CatalogItem.name.asc(), CatalogItem.id.asc())
    with store_errors():
        return query.all()


def low_stock_items(threshold: int | Decimal | None = None) -> list[CatalogItem]:
    """Items whose stock is strictly below the threshold, lowest first."""
    if threshold is None:
        threshold = current_app.config.get("LOW_STOCK_THRESHOLD", 10)
    query = (
        db.session.query(CatalogItem)
        .filter(CatalogItem.stock < threshold)
        .order_by(CatalogItem.stock.asc(), CatalogItem.id.asc())
    )
    with store_errors():
        return query.all()


def create_item(patch: dict) -> CatalogItem:
    """
    Create a catalog item from a client payload.

    Raises:
        ValidationError: bad field types or negative price/cost/stock
        ConflictError: an explicit id that already exists
    """
    cleaned = validate_payload(model=CatalogItem, payload=patch, policy=CATALOG_POLICY, partial=False)
    enforce_rules_catalog_item(cleaned)
    record = _with_defaults(cleaned)

    def _write():
        if not record.get("id"):
            record["id"] = store_service.next_time_id("catalog")
        elif store_service.find("catalog", record["id"]) is not None:
            raise ConflictError(f"Catalog item {record['id']!r} already exists")
        return store_service.put("catalog", record)

    return mutation_service.execute("catalog", "create", None, _write)


def update_item(item_id: str, patch: dict) -> CatalogItem:
    """Apply a partial edit; id cannot change."""
    if "id" in (patch or {}):
        raise ValidationError("Field not allowed: id")
    cleaned = validate_payload(model=CatalogItem, payload=patch, policy=CATALOG_POLICY, partial=True)
    enforce_rules_catalog_item(cleaned)

    def _write():
        store_service.get("catalog", item_id)
        return store_service.put("catalog", {**cleaned, "id": item_id})

    return mutation_service.execute("catalog", "update", None, _write)


def delete_item(item_id: str) -> None:
    """Remove an item. Past sales keep their line snapshots."""
    mutation_service.execute(
        "catalog", "delete", {"id": item_id}, lambda: store_service.delete("catalog", item_id)
    )


def seed_catalog(items: list[dict] | None = None) -> int:
    """Populate an empty catalog. Returns how many items were created (0 if not empty)."""
    with store_errors():
        if db.session.query(CatalogItem).count() > 0:
            return 0
    created = 0
    for item in items or STARTER_ITEMS:
        create_item(item)
        created += 1
    return created
