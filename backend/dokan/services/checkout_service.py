# Overview: Checkout transaction; turns a cart into an immutable sale and decrements catalog stock.

"""
Checkout

The one composite write in the till. The sale row, its line snapshots and
every stock decrement commit in a single store transaction together with
the sync-queue entries describing them, so a crash can never leave a sale
recorded without its stock change (or the reverse).

RULES:
- Empty carts, non-positive quantities and negative prices are rejected.
- paid defaults to the total; an explicit paid amount is floored at 0.
- due = max(0, total - paid), change = max(0, paid - total); never both > 0.
- A sale with due > 0 needs a customer name.
- Stock is clamped at zero. Checkout does not re-check availability, so two
  carts sharing the last unit both succeed and stock ends at 0.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable

from flask import current_app

from ..models import SaleRecord
from ..validation import ValidationError, parse_cents, parse_decimal
from . import store_service, mutation_service
from .mutation_service import Mutation
from dokan.time_utils import utcnow


ZERO = Decimal("0")

# Fractional digits kept by sale_lines.quantity and catalog_items.stock
QUANTITY_SCALE = 3


@dataclass(frozen=True)
class CartLine:
    item_id: str
    quantity: Decimal
    price_cents: int | None = None  # None -> catalog price

    @classmethod
    def coerce(cls, raw: Any) -> "CartLine":
        """Accept a CartLine, a dict from JSON, or an (item_id, quantity[, price_cents]) tuple."""
        if isinstance(raw, CartLine):
            line = raw
        elif isinstance(raw, dict):
            if not raw.get("item_id"):
                raise ValidationError("item_id is required for every cart line")
            if raw.get("quantity") is None:
                raise ValidationError("quantity is required for every cart line")
            line = cls(
                item_id=str(raw["item_id"]).strip(),
                quantity=parse_decimal("quantity", raw["quantity"]),
                price_cents=None if raw.get("price_cents") is None else parse_cents("price_cents", raw["price_cents"]),
            )
        elif isinstance(raw, (tuple, list)) and len(raw) in (2, 3):
            price = raw[2] if len(raw) == 3 else None
            line = cls(
                item_id=str(raw[0]).strip(),
                quantity=parse_decimal("quantity", raw[1]),
                price_cents=None if price is None else parse_cents("price_cents", price),
            )
        else:
            raise ValidationError("Invalid cart line")

        # Also catches CartLine instances built directly with a float or sub-scale quantity
        line = cls(line.item_id, parse_decimal("quantity", line.quantity, scale=QUANTITY_SCALE), line.price_cents)
        if line.quantity <= ZERO:
            raise ValidationError(f"Quantity for item {line.item_id!r} must be positive")
        if line.price_cents is not None and line.price_cents < 0:
            raise ValidationError(f"Price for item {line.item_id!r} cannot be negative")
        return line


@dataclass(frozen=True)
class CheckoutTotals:
    total_cents: int
    profit_cents: int
    paid_cents: int
    due_cents: int
    change_cents: int

    def to_dict(self) -> dict:
        return {
            "total_cents": self.total_cents,
            "profit_cents": self.profit_cents,
            "paid_cents": self.paid_cents,
            "due_cents": self.due_cents,
            "change_cents": self.change_cents,
        }


def _to_cents(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def settle(total_cents: int, paid_cents: int | None) -> tuple[int, int, int]:
    """Resolve (paid, due, change) for a total and an optional tendered amount."""
    paid = total_cents if paid_cents is None else max(0, paid_cents)
    due = max(0, total_cents - paid)
    change = max(0, paid - total_cents)
    return paid, due, change


def _coerce_cart(cart: Iterable[Any]) -> list[CartLine]:
    lines = [CartLine.coerce(raw) for raw in (cart or [])]
    if not lines:
        raise ValidationError("Cart is empty")
    return lines


def _price_lines(lines: list[CartLine]) -> tuple[list[dict], dict]:
    """Snapshot each cart line against the catalog. Returns (line snapshots, items by id)."""
    items = {}
    snapshots = []
    for line in lines:
        item = items.get(line.item_id)
        if item is None:
            item = items[line.item_id] = store_service.get("catalog", line.item_id)

        price = item.price_cents if line.price_cents is None else line.price_cents
        snapshots.append({
            "item_id": item.id,
            "name": item.name,
            "name_bn": item.name_bn,
            "category": item.category,
            "unit": item.unit,
            "quantity": line.quantity,
            "price_cents": price,
            "cost_cents": item.cost_cents,
            "line_total_cents": _to_cents(price * line.quantity),
            "line_profit_cents": _to_cents((price - item.cost_cents) * line.quantity),
        })
    return snapshots, items


def _totals(snapshots: list[dict], paid_cents: int | None) -> CheckoutTotals:
    total = sum(s["line_total_cents"] for s in snapshots)
    profit = sum(s["line_profit_cents"] for s in snapshots)
    paid, due, change = settle(total, paid_cents)
    return CheckoutTotals(total, profit, paid, due, change)


def preview(cart: Iterable[Any], paid_cents: int | None = None) -> CheckoutTotals:
    """Totals for a cart without writing anything."""
    lines = _coerce_cart(cart)
    if paid_cents is not None:
        paid_cents = parse_cents("paid_cents", paid_cents)
    snapshots, _ = _price_lines(lines)
    return _totals(snapshots, paid_cents)


def checkout(
    cart: Iterable[Any],
    *,
    customer_name: str | None = None,
    customer_phone: str | None = None,
    paid_cents: int | None = None,
    payment_method: str = "cash",
) -> SaleRecord:
    """
    Finalize a cart into a SaleRecord and decrement stock atomically.

    Raises:
        ValidationError: empty cart, bad line, or due without customer name
        NotFoundError: a cart line names an unknown catalog item
        StoreUnavailable: the local store could not be written
    """
    lines = _coerce_cart(cart)
    if paid_cents is not None:
        paid_cents = parse_cents("paid_cents", paid_cents)
    customer_name = (customer_name or "").strip() or None
    customer_phone = (customer_phone or "").strip() or None

    def _unit():
        snapshots, items = _price_lines(lines)
        totals = _totals(snapshots, paid_cents)
        if totals.due_cents > 0 and not customer_name:
            raise ValidationError("Customer name is required when a due amount remains")

        sale = store_service.put("sales", {
            "id": store_service.next_time_id("sales"),
            "date": utcnow(),
            "lines": snapshots,
            "total_cents": totals.total_cents,
            "profit_cents": totals.profit_cents,
            "paid_cents": totals.paid_cents,
            "due_cents": totals.due_cents,
            "payment_method": payment_method or "cash",
            "customer_name": customer_name,
            "customer_phone": customer_phone,
        })

        # Repeated lines for one item decrement once, by their sum
        requested: OrderedDict[str, Decimal] = OrderedDict()
        for line in lines:
            requested[line.item_id] = requested.get(line.item_id, ZERO) + line.quantity

        mutations = [Mutation("sales", "create", sale.to_dict())]
        for item_id, quantity in requested.items():
            item = items[item_id]
            if quantity > item.stock:
                current_app.logger.warning(
                    "Sale %s oversells item %s (requested %s, on hand %s); clamping stock to 0",
                    sale.id, item_id, quantity, item.stock,
                )
            new_stock = max(ZERO, item.stock - quantity)
            updated = store_service.put("catalog", {"id": item_id, "stock": new_stock})
            mutations.append(Mutation("catalog", "update", updated.to_dict()))

        return sale, mutations

    sale = mutation_service.execute_unit(["catalog", "sales"], _unit)
    current_app.logger.info(
        "Checkout %s: total=%d paid=%d due=%d", sale.id, sale.total_cents, sale.paid_cents, sale.due_cents
    )
    return sale
