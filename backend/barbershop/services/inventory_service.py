# Overview: Service-layer operations for inventory; encapsulates business logic and database work.

"""
Barbershop Inventory Ledger

================================================================================
PURPOSE: Keep product stock and the sales history consistent.
================================================================================

LEDGER FIELDS (stock, sales) follow the conditional-write discipline:

sell(product, q) is ONE unit of work:
    1. UPDATE inventory SET stock = stock - q
       WHERE id = :id AND shop_id = :shop AND stock >= q
    2. INSERT the SaleRecord (line snapshots of cost, price, profit)
    3. INSERT the audit event
    4. COMMIT
If step 1 matches no row the stock was insufficient (possibly because a
concurrent sale got there first) and nothing is written. Two sellers racing
for the last units cannot both succeed.

Admin stock edits on an existing product are conditional too:
    restock=d        -> SET stock = stock + d WHERE stock + d >= 0
    stock=n, expected_stock=e -> SET stock = n WHERE stock = e
A plain stock overwrite without expected_stock is refused.

NON-LEDGER FIELDS (name, description, provider, ...) are last-write-wins.

profit_margin = (price - cost) / price * 100, rounded to 2 places. It is
derived output recomputed on every write.

stats_for_period() and low_stock() are pure: they work on record lists the
caller already fetched.
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from flask import current_app
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from ..errors import ConflictError, InsufficientStock, PermissionDenied, ValidationError
from ..extensions import db
from ..models import Product, SaleRecord, BarberStatus, PRODUCT_CATEGORIES
from ..validation import require_text, optional_text, coerce_int, coerce_cents, coerce_choice
from . import store
from .audit_service import append_audit_event
from .concurrency import run_with_retry
from .session_service import ActorContext
from barbershop.time_utils import utcnow, day_range, month_range


PRODUCT_FIELDS = {
    "name", "category", "provider", "description", "barcode",
    "cost_cents", "price_cents", "stock", "min_stock",
}


def _require_admin(actor: ActorContext) -> None:
    if not actor.is_admin:
        raise PermissionDenied("Only shop admins can manage inventory")


def profit_margin(cost_cents: int, price_cents: int) -> float:
    if price_cents <= 0:
        return 0.0
    return round((price_cents - cost_cents) / price_cents * 100, 2)


def _normalize_product(data: dict) -> dict:
    clean = {}
    for key, value in data.items():
        if key not in PRODUCT_FIELDS:
            continue
        if key == "name":
            clean[key] = require_text(value, "name", max_length=255)
        elif key == "category":
            clean[key] = coerce_choice(value or "other", "category", PRODUCT_CATEGORIES)
        elif key in ("provider", "description", "barcode"):
            clean[key] = optional_text(value)
        elif key in ("cost_cents", "price_cents"):
            clean[key] = coerce_cents(value, key)
        elif key in ("stock", "min_stock"):
            clean[key] = coerce_int(value, key, minimum=0)
    return clean


def _check_pricing(cost_cents: int, price_cents: int) -> None:
    if price_cents <= cost_cents:
        raise ValidationError(
            "Sale price must be greater than cost",
            details={"field": "price_cents"},
        )


def _stock_edit(data: dict, clean: dict):
    """
    Conditional stock change for an existing product, or None.

    "stock" overwrites the level and needs "expected_stock", the level the
    caller last saw. "restock" is a signed delta applied in the UPDATE itself.
    Returns (conditions, new_stock_value).
    """
    if "restock" in data:
        if "stock" in clean:
            raise ValidationError("Send either stock or restock, not both", details={"field": "restock"})
        delta = coerce_int(data["restock"], "restock")
        return [Product.stock + delta >= 0], Product.stock + delta
    if "stock" in clean:
        if data.get("expected_stock") is None:
            raise ValidationError(
                "expected_stock is required to overwrite stock",
                details={"field": "expected_stock"},
            )
        expected = coerce_int(data["expected_stock"], "expected_stock", minimum=0)
        return [Product.stock == expected], clean.pop("stock")
    return None


def _integrity_conflict(exc: IntegrityError, barcode: str | None) -> ConflictError:
    if "barcode" in str(exc.orig):
        return ConflictError(
            "Another product already uses this barcode",
            details={"field": "barcode", "barcode": barcode},
        )
    return ConflictError("Product changed during the update, reload and try again")


def upsert_product(actor: ActorContext, data: dict, product_id: int | None = None) -> Product:
    """
    Create a product (product_id None) or patch an existing one.

    Validates price > cost, stock >= 0, min_stock >= 0 and barcode uniqueness
    within the shop. On an existing product, stock is a ledger field: it only
    changes through a conditional write (see _stock_edit), so a sale that
    commits between the admin's read and this write is never overwritten.

    Raises:
        ValidationError, ConflictError (barcode owned by another product, or
        stock moved since expected_stock was read), InsufficientStock
        (restock would drive stock negative), NotFound (product_id not in
        the shop)
    """
    _require_admin(actor)
    clean = _normalize_product(data)

    stock_edit = None
    if product_id is None:
        if "restock" in data:
            raise ValidationError("New products take an initial stock, not restock", details={"field": "restock"})
        for required in ("name", "cost_cents", "price_cents"):
            if required not in clean:
                raise ValidationError(f"{required} is required", details={"field": required})
        clean.setdefault("category", "other")
        clean.setdefault("stock", 0)
        clean.setdefault("min_stock", 0)
    else:
        stock_edit = _stock_edit(data, clean)

    def _op():
        existing = store.require("inventory", actor.shop_id, product_id) if product_id is not None else None

        cost = clean.get("cost_cents", existing.cost_cents if existing else None)
        price = clean.get("price_cents", existing.price_cents if existing else None)
        _check_pricing(cost, price)

        barcode = clean.get("barcode")
        if barcode:
            owners = store.query("inventory", actor.shop_id, barcode=barcode)
            if any(p.id != product_id for p in owners):
                raise ConflictError(
                    "Another product already uses this barcode",
                    details={"field": "barcode", "barcode": barcode},
                )

        now = utcnow()
        patch = dict(clean)
        patch["profit_margin"] = profit_margin(cost, price)
        patch["updated_at"] = now
        patch["updated_by"] = actor.user_id

        try:
            if existing is None:
                product = store.create("inventory", actor.shop_id, patch)
                action = "product.created"
            elif stock_edit is not None:
                conditions, new_stock = stock_edit
                patch["stock"] = new_stock
                if not store.update_if("inventory", actor.shop_id, product_id, conditions, patch):
                    db.session.refresh(existing)
                    if "restock" in data:
                        raise InsufficientStock(product_id, -coerce_int(data["restock"], "restock"), existing.stock)
                    raise ConflictError(
                        "Stock changed since it was read, reload and try again",
                        details={"field": "stock", "stock": existing.stock},
                    )
                product = store.require("inventory", actor.shop_id, product_id)
                action = "product.restocked"
            else:
                product = store.update("inventory", actor.shop_id, product_id, patch)
                action = "product.updated"

            append_audit_event(
                shop_id=actor.shop_id,
                entity_type="product",
                entity_id=product.id,
                action=action,
                actor_id=actor.user_id,
                occurred_at=now,
                note=f"stock {product.stock}" if action == "product.restocked" else None,
            )
            db.session.commit()
        except IntegrityError as exc:
            # A concurrent writer took the barcode or moved the price/cost pair
            db.session.rollback()
            raise _integrity_conflict(exc, barcode) from exc
        return product

    return run_with_retry(_op)


def delete_product(actor: ActorContext, product_id: int) -> None:
    """Remove a product. Past sales keep their name snapshot; product_id goes NULL."""
    _require_admin(actor)

    def _op():
        store.require("inventory", actor.shop_id, product_id)
        # Detach history explicitly; SQLite does not enforce ON DELETE SET NULL by default
        db.session.query(SaleRecord).filter(
            SaleRecord.shop_id == actor.shop_id,
            SaleRecord.product_id == product_id,
        ).update({"product_id": None}, synchronize_session=False)
        store.delete("inventory", actor.shop_id, product_id)
        append_audit_event(
            shop_id=actor.shop_id,
            entity_type="product",
            entity_id=product_id,
            action="product.deleted",
            actor_id=actor.user_id,
        )
        db.session.commit()

    run_with_retry(_op)
    current_app.logger.info("Product %s deleted from shop %s", product_id, actor.shop_id)


def list_products(actor: ActorContext, *, search: str | None = None, category: str | None = None) -> list[Product]:
    """Products of the shop by name; search matches name, barcode or provider."""
    conditions = []
    search = optional_text(search)
    if search:
        like = f"%{search}%"
        conditions.append(or_(Product.name.ilike(like), Product.barcode.ilike(like), Product.provider.ilike(like)))
    if category:
        category = coerce_choice(category, "category", PRODUCT_CATEGORIES)

    return store.query(
        "inventory",
        actor.shop_id,
        category=category,
        conditions=conditions,
        order_by=[Product.name.asc(), Product.id.asc()],
    )


def find_by_barcode(actor: ActorContext, barcode: str) -> Product | None:
    barcode = optional_text(barcode)
    if not barcode:
        return None
    found = store.query("inventory", actor.shop_id, barcode=barcode, limit=1)
    return found[0] if found else None


def low_stock(products) -> list:
    """Products with stock <= min_stock. Pure."""
    return [p for p in products if p.stock <= p.min_stock]


def sell(actor: ActorContext, product_id: int, quantity) -> SaleRecord:
    """
    Sell quantity units of a product. Returns the created SaleRecord.

    Any shop member may sell; barbers must be active.

    Raises:
        ValidationError: quantity is not an integer
        InsufficientStock: quantity < 1, or quantity > stock at write time
            (nothing written)
        NotFound: product not in the shop
    """
    quantity = coerce_int(quantity, "quantity")
    if actor.is_barber and actor.status != BarberStatus.ACTIVE:
        raise PermissionDenied("Only active barbers can sell products")

    def _op():
        product = store.require("inventory", actor.shop_id, product_id)
        if quantity < 1:
            raise InsufficientStock(product_id, quantity, product.stock)
        unit_cost = product.cost_cents
        unit_price = product.price_cents
        name = product.name

        now = utcnow()
        applied = store.update_if(
            "inventory",
            actor.shop_id,
            product_id,
            [
                Product.stock >= quantity,
                # Line snapshots must match the prices the decrement saw
                Product.cost_cents == unit_cost,
                Product.price_cents == unit_price,
            ],
            {"stock": Product.stock - quantity, "updated_at": now, "updated_by": actor.user_id},
        )
        if not applied:
            db.session.refresh(product)
            if product.stock < quantity:
                raise InsufficientStock(product_id, quantity, product.stock)
            # Prices moved under us; retry against the new snapshot
            raise ConflictError("Product changed during the sale, try again")

        sale = store.create("sales", actor.shop_id, {
            "product_id": product_id,
            "product_name": name,
            "quantity": quantity,
            "cost_cents": unit_cost * quantity,
            "price_cents": unit_price * quantity,
            "profit_cents": (unit_price - unit_cost) * quantity,
            "sold_by": actor.user_id,
            "sold_by_name": actor.name,
            "created_at": now,
        })
        append_audit_event(
            shop_id=actor.shop_id,
            entity_type="product",
            entity_id=product_id,
            action="product.sold",
            actor_id=actor.user_id,
            occurred_at=now,
            note=f"sale {sale.id}: -{quantity}",
        )
        db.session.commit()
        return sale

    sale = run_with_retry(_op)
    current_app.logger.info(
        "Sale %s: product %s x%d in shop %s by user %s",
        sale.id, product_id, quantity, actor.shop_id, actor.user_id,
    )
    return sale


def list_sales(
    actor: ActorContext,
    *,
    start: datetime | None = None,
    end: datetime | None = None,
    product_id: int | None = None,
) -> list[SaleRecord]:
    """Sales of the shop, newest first, optionally within [start, end)."""
    conditions = []
    if start is not None:
        conditions.append(SaleRecord.created_at >= start)
    if end is not None:
        conditions.append(SaleRecord.created_at < end)
    return store.query(
        "sales",
        actor.shop_id,
        product_id=product_id,
        conditions=conditions,
        order_by=[SaleRecord.created_at.desc(), SaleRecord.id.desc()],
    )


@dataclass
class ProductRanking:
    product_id: int | None
    product_name: str
    quantity: int = 0
    revenue_cents: int = 0
    profit_cents: int = 0

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "revenue_cents": self.revenue_cents,
            "profit_cents": self.profit_cents,
        }


@dataclass
class PeriodStats:
    revenue_cents: int = 0
    profit_cents: int = 0
    count: int = 0
    units: int = 0
    top_products: list[ProductRanking] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "revenue_cents": self.revenue_cents,
            "profit_cents": self.profit_cents,
            "count": self.count,
            "units": self.units,
            "top_products": [p.to_dict() for p in self.top_products],
        }


def stats_for_period(sales, start: datetime | None = None, end: datetime | None = None, top_n: int = 5) -> PeriodStats:
    """
    Revenue, profit and count of sales with created_at in [start, end).

    Either bound may be None (open). The top_n ranking is by total revenue,
    ties broken by product name. Pure.
    """
    stats = PeriodStats()
    ranking: dict = {}

    for sale in sales:
        if start is not None and sale.created_at < start:
            continue
        if end is not None and sale.created_at >= end:
            continue

        stats.revenue_cents += sale.price_cents
        stats.profit_cents += sale.profit_cents
        stats.count += 1
        stats.units += sale.quantity

        # Deleted products keep ranking under their name snapshot
        key = sale.product_id if sale.product_id is not None else f"name:{sale.product_name}"
        entry = ranking.get(key)
        if entry is None:
            entry = ranking[key] = ProductRanking(sale.product_id, sale.product_name)
        entry.quantity += sale.quantity
        entry.revenue_cents += sale.price_cents
        entry.profit_cents += sale.profit_cents

    ordered = sorted(ranking.values(), key=lambda r: (-r.revenue_cents, r.product_name))
    stats.top_products = ordered[:max(top_n, 0)]
    return stats


def inventory_stats(actor: ActorContext, now: datetime | None = None) -> dict:
    """Today, this month and all-time sales figures plus stock alerts."""
    now = now or utcnow()
    top_n = current_app.config.get("TOP_PRODUCTS_LIMIT", 5)

    sales = list_sales(actor)
    products = list_products(actor)

    day_start, day_end = day_range(now.date())
    month_start, month_end = month_range(now.year, now.month)

    alerts = low_stock(products)
    return {
        "today": stats_for_period(sales, day_start, day_end, top_n).to_dict(),
        "month": stats_for_period(sales, month_start, month_end, top_n).to_dict(),
        "all_time": stats_for_period(sales, None, None, top_n).to_dict(),
        "product_count": len(products),
        "stock_units": sum(p.stock for p in products),
        "stock_value_cents": sum(p.cost_cents * p.stock for p in products),
        "low_stock": [p.to_dict() for p in alerts],
    }
