from __future__ import annotations

from ..extensions import db
from dokan.time_utils import to_utc_z, parse_iso_datetime
from dokan.validation import format_decimal, parse_decimal


class SaleRecord(db.Model):
    """
    Completed sale.

    Created once at checkout and immutable afterwards. Line items are value
    snapshots of the catalog at the moment of sale, so later edits to a
    product's name, unit or price never rewrite history.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.Index("ix_sales_due_date", "due_cents", "date"),
    )

    # Time-derived (epoch milliseconds), e.g. "1739251200123"
    id = db.Column(db.String(32), primary_key=True)
    date = db.Column(db.DateTime(timezone=True), nullable=False, index=True)

    # Totals in cents
    total_cents = db.Column(db.Integer, nullable=False)
    profit_cents = db.Column(db.Integer, nullable=False)
    paid_cents = db.Column(db.Integer, nullable=False)
    due_cents = db.Column(db.Integer, nullable=False, default=0)

    payment_method = db.Column(db.String(16), nullable=False, default="cash")

    # Required whenever due_cents > 0
    customer_name = db.Column(db.String(255), nullable=True)
    customer_phone = db.Column(db.String(32), nullable=True, index=True)

    lines = db.relationship(
        "SaleLine",
        order_by="SaleLine.position",
        cascade="all, delete-orphan",
        lazy="selectin",
        back_populates="sale",
    )

    @property
    def change_cents(self) -> int:
        return max(0, self.paid_cents - self.total_cents)

    @classmethod
    def from_dict(cls, data: dict) -> "SaleRecord":
        date = data.get("date")
        if isinstance(date, str):
            date = parse_iso_datetime(date)
        sale = cls(
            id=data["id"],
            date=date,
            total_cents=data["total_cents"],
            profit_cents=data["profit_cents"],
            paid_cents=data["paid_cents"],
            due_cents=data.get("due_cents", 0),
            payment_method=data.get("payment_method") or "cash",
            customer_name=data.get("customer_name"),
            customer_phone=data.get("customer_phone"),
        )
        sale.lines = [
            SaleLine.from_dict(line, position=i)
            for i, line in enumerate(data.get("lines") or [])
        ]
        return sale

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": to_utc_z(self.date),
            "lines": [line.to_dict() for line in self.lines],
            "total_cents": self.total_cents,
            "profit_cents": self.profit_cents,
            "paid_cents": self.paid_cents,
            "due_cents": self.due_cents,
            "change_cents": self.change_cents,
            "payment_method": self.payment_method,
            "customer_name": self.customer_name,
            "customer_phone": self.customer_phone,
        }


class SaleLine(db.Model):
    """Snapshot of one cart line; item_id is a value, not a foreign key."""
    __tablename__ = "sale_lines"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.String(32), db.ForeignKey("sales.id"), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False, default=0)

    item_id = db.Column(db.String(64), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    name_bn = db.Column(db.String(255), nullable=False, default="")
    category = db.Column(db.String(64), nullable=False, default="General")
    unit = db.Column(db.String(16), nullable=False, default="pcs")

    quantity = db.Column(db.Numeric(12, 3), nullable=False)
    price_cents = db.Column(db.Integer, nullable=False)
    cost_cents = db.Column(db.Integer, nullable=False)
    line_total_cents = db.Column(db.Integer, nullable=False)
    line_profit_cents = db.Column(db.Integer, nullable=False)

    sale = db.relationship("SaleRecord", back_populates="lines")

    @classmethod
    def from_dict(cls, data: dict, position: int = 0) -> "SaleLine":
        return cls(
            position=position,
            item_id=data["item_id"],
            name=data["name"],
            name_bn=data.get("name_bn") or "",
            category=data.get("category") or "General",
            unit=data.get("unit") or "pcs",
            quantity=parse_decimal("quantity", data["quantity"]),
            price_cents=data["price_cents"],
            cost_cents=data["cost_cents"],
            line_total_cents=data["line_total_cents"],
            line_profit_cents=data["line_profit_cents"],
        )

    def to_dict(self) -> dict:
        return {
            "item_id": self.item_id,
            "name": self.name,
            "name_bn": self.name_bn,
            "category": self.category,
            "unit": self.unit,
            "quantity": format_decimal(self.quantity),
            "price_cents": self.price_cents,
            "cost_cents": self.cost_cents,
            "line_total_cents": self.line_total_cents,
            "line_profit_cents": self.line_profit_cents,
        }
