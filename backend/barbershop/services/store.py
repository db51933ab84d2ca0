# Overview: Tenant-scoped document store over the SQLAlchemy session.

"""
Barbershop Document Store

Every read and write goes through this module, and every call takes the
shop_id partition key. A record belonging to another shop is
indistinguishable from a missing record: get() returns None and require()
raises NotFound, never a "forbidden" that would reveal it exists.

Nothing here commits. Services compose several calls into one unit of work
and commit it inside concurrency.run_with_retry.

COLLECTIONS:
    users, services, haircuts, inventory, sales, expenses, appointments,
    audit_events

CONDITIONAL WRITES:
    update_if() issues a single UPDATE ... WHERE <id, shop, conditions>
    statement and reports whether the precondition still held. This is the
    primitive behind stock decrements and lifecycle transitions: two callers
    racing on the same precondition cannot both win.
"""

from __future__ import annotations

from typing import Any, Iterable

from sqlalchemy import update as sa_update

from ..errors import NotFound
from ..extensions import db
from ..models import (
    User,
    Service,
    HaircutRecord,
    Product,
    SaleRecord,
    Expense,
    Appointment,
    AuditEvent,
)


COLLECTIONS = {
    "users": User,
    "services": Service,
    "haircuts": HaircutRecord,
    "inventory": Product,
    "sales": SaleRecord,
    "expenses": Expense,
    "appointments": Appointment,
    "audit_events": AuditEvent,
}


def model_for(collection: str):
    try:
        return COLLECTIONS[collection]
    except KeyError:
        raise ValueError(f"Unknown collection '{collection}'") from None


def scoped_query(collection: str, shop_id: int):
    """Base query for a collection, filtered to one shop."""
    if shop_id is None:
        raise ValueError("shop_id is required")
    model = model_for(collection)
    return db.session.query(model).filter(model.shop_id == shop_id)


def get(collection: str, shop_id: int, record_id: int):
    """Fetch one record of the shop, or None."""
    return scoped_query(collection, shop_id).filter(model_for(collection).id == record_id).first()


def require(collection: str, shop_id: int, record_id: int):
    record = get(collection, shop_id, record_id)
    if record is None:
        raise NotFound(f"No record {record_id} in {collection}")
    return record


def query(
    collection: str,
    shop_id: int,
    *,
    conditions: Iterable = (),
    order_by: Iterable = (),
    limit: int | None = None,
    **predicates: Any,
) -> list:
    """
    Tenant-scoped query.

    Keyword predicates are equality filters; a list/tuple/set value becomes
    an IN filter; None values are skipped. conditions takes extra SQLAlchemy
    expressions for ranges and comparisons.
    """
    model = model_for(collection)
    q = scoped_query(collection, shop_id)

    for field, value in predicates.items():
        if value is None:
            continue
        column = getattr(model, field)
        if isinstance(value, (list, tuple, set, frozenset)):
            q = q.filter(column.in_(list(value)))
        else:
            q = q.filter(column == value)

    for condition in conditions:
        q = q.filter(condition)

    order = list(order_by) or [model.id.asc()]
    q = q.order_by(*order)

    if limit is not None:
        q = q.limit(limit)
    return q.all()


def create(collection: str, shop_id: int, data: dict):
    """Insert a record into the shop's partition. shop_id in data is ignored."""
    model = model_for(collection)
    fields = {k: v for k, v in data.items() if k != "shop_id"}
    record = model(shop_id=shop_id, **fields)
    db.session.add(record)
    db.session.flush()  # assigns record.id without committing
    return record


def update(collection: str, shop_id: int, record_id: int, patch: dict):
    """
    Last-write-wins update for non-ledger fields.

    shop_id and id are never patched.
    """
    record = require(collection, shop_id, record_id)
    for field, value in patch.items():
        if field in ("id", "shop_id"):
            continue
        setattr(record, field, value)
    db.session.flush()
    return record


def delete(collection: str, shop_id: int, record_id: int) -> bool:
    record = get(collection, shop_id, record_id)
    if record is None:
        return False
    db.session.delete(record)
    db.session.flush()
    return True


def update_if(
    collection: str,
    shop_id: int,
    record_id: int,
    conditions: Iterable,
    patch: dict,
) -> bool:
    """
    Atomic conditional update.

    Applies patch only if the record exists in the shop and every condition
    holds at write time. Patch values may be SQL expressions
    (e.g. Product.stock - 3). Returns True when exactly one row changed.
    """
    model = model_for(collection)

    # Pending ORM changes must reach the DB before the statement runs
    db.session.flush()

    stmt = (
        sa_update(model)
        .where(model.id == record_id, model.shop_id == shop_id, *conditions)
        .values(**patch)
        .execution_options(synchronize_session=False)
    )
    result = db.session.execute(stmt)
    if result.rowcount != 1:
        return False

    _expire_cached(model, record_id)
    return True


def _expire_cached(model, record_id: int) -> None:
    """Drop stale attribute values of an instance loaded before update_if."""
    for obj in list(db.session.identity_map.values()):
        if isinstance(obj, model) and obj.id == record_id:
            db.session.expire(obj)
