from __future__ import annotations

from decimal import Decimal

from ..extensions import db
from dokan.time_utils import to_utc_z
from dokan.validation import format_decimal


class CatalogItem(db.Model):
    """
    Sellable product with price, cost and on-hand stock.

    Stock is a decimal so loose goods (kg, L) sell in fractions. Checkout
    decrements it but never below zero.

    LOOKUP PATTERN:
    - by id: db.session.get(CatalogItem, item_id)
    - low stock: filter(CatalogItem.stock < threshold), served by the
      (category, stock) and stock indexes
    """
    __tablename__ = "catalog_items"
    __table_args__ = (
        db.Index("ix_catalog_items_category_stock", "category", "stock"),
        db.Index("ix_catalog_items_name", "name"),
    )

    id = db.Column(db.String(64), primary_key=True)

    # Display names: English and Bangla
    name = db.Column(db.String(255), nullable=False)
    name_bn = db.Column(db.String(255), nullable=False, default="")

    category = db.Column(db.String(64), nullable=False, default="General", index=True)

    # Authoritative storage in cents
    price_cents = db.Column(db.Integer, nullable=False, default=0)
    cost_cents = db.Column(db.Integer, nullable=False, default=0)

    stock = db.Column(db.Numeric(12, 3), nullable=False, default=Decimal("0"), index=True)
    unit = db.Column(db.String(16), nullable=False, default="pcs")
    image = db.Column(db.String(512), nullable=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    __mapper_args__ = {"version_id_col": version_id}

    WRITABLE_FIELDS = {"id", "name", "name_bn", "category", "price_cents", "cost_cents", "stock", "unit", "image"}

    def __repr__(self) -> str:
        return f"<CatalogItem id={self.id!r} name={self.name!r} stock={self.stock}>"

    @classmethod
    def from_dict(cls, data: dict) -> "CatalogItem":
        item = cls(id=data["id"])
        item.apply(data)
        return item

    def apply(self, data: dict) -> None:
        for key, value in data.items():
            if key in self.WRITABLE_FIELDS and key != "id":
                setattr(self, key, value)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "name_bn": self.name_bn,
            "category": self.category,
            "price_cents": self.price_cents,
            "cost_cents": self.cost_cents,
            "stock": format_decimal(self.stock),
            "unit": self.unit,
            "image": self.image,
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
