from __future__ import annotations

from ..extensions import db
from barbershop.time_utils import to_utc_z


class Product(db.Model):
    """
    Retail product held in a shop's inventory.

    INVARIANTS:
    - price_cents > cost_cents (rejected at write time otherwise)
    - stock >= 0 at all times; enforced by a CHECK and by the conditional
      decrement in inventory_service.sell
    - barcode, when present, is unique within the shop

    profit_margin is derived output, recomputed on every write.
    """
    __tablename__ = "inventory"
    __table_args__ = (
        db.UniqueConstraint("shop_id", "barcode", name="uq_inventory_shop_barcode"),
        db.CheckConstraint("stock >= 0", name="ck_inventory_stock_nonneg"),
        db.CheckConstraint("min_stock >= 0", name="ck_inventory_min_stock_nonneg"),
        db.CheckConstraint("price_cents > cost_cents", name="ck_inventory_price_over_cost"),
        db.Index("ix_inventory_shop_name", "shop_id", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    shop_id = db.Column(db.Integer, db.ForeignKey("shops.id"), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(32), nullable=False, default="other")
    provider = db.Column(db.String(255), nullable=True)
    description = db.Column(db.Text, nullable=True)
    barcode = db.Column(db.String(64), nullable=True)

    cost_cents = db.Column(db.Integer, nullable=False)
    price_cents = db.Column(db.Integer, nullable=False)
    profit_margin = db.Column(db.Float, nullable=False, default=0.0)

    stock = db.Column(db.Integer, nullable=False, default=0)
    min_stock = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=True)
    updated_by = db.Column(db.Integer, nullable=True)

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r} stock={self.stock} shop_id={self.shop_id}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "shop_id": self.shop_id,
            "name": self.name,
            "category": self.category,
            "provider": self.provider,
            "description": self.description,
            "barcode": self.barcode,
            "cost_cents": self.cost_cents,
            "price_cents": self.price_cents,
            "profit_margin": self.profit_margin,
            "stock": self.stock,
            "min_stock": self.min_stock,
            "low_stock": self.stock <= self.min_stock,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class SaleRecord(db.Model):
    """
    Immutable record of a product sale.

    Amounts are snapshots for the whole line:
        cost_cents   = unit cost  * quantity
        price_cents  = unit price * quantity
        profit_cents = price_cents - cost_cents
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_sales_quantity_pos"),
        db.Index("ix_sales_shop_created", "shop_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    shop_id = db.Column(db.Integer, db.ForeignKey("shops.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("inventory.id", ondelete="SET NULL"), nullable=True, index=True)
    product_name = db.Column(db.String(255), nullable=False)

    quantity = db.Column(db.Integer, nullable=False)
    cost_cents = db.Column(db.Integer, nullable=False)
    price_cents = db.Column(db.Integer, nullable=False)
    profit_cents = db.Column(db.Integer, nullable=False)

    sold_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    sold_by_name = db.Column(db.String(120), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "shop_id": self.shop_id,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "cost_cents": self.cost_cents,
            "price_cents": self.price_cents,
            "profit_cents": self.profit_cents,
            "sold_by": self.sold_by,
            "sold_by_name": self.sold_by_name,
            "created_at": to_utc_z(self.created_at),
        }
