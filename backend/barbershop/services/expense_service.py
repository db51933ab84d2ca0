# Overview: Service-layer operations for expenses; encapsulates business logic and database work.

"""
Expense Service

Expenses are immutable once recorded. A wrong entry is corrected by deleting
it and recording a new one. Admin only.
"""

from __future__ import annotations

from datetime import date

from flask import current_app

from ..errors import PermissionDenied
from ..extensions import db
from ..models import Expense, ExpenseType, EXPENSE_CATEGORIES
from ..validation import require_text, coerce_cents, coerce_choice, coerce_date, coerce_enum
from . import store
from .audit_service import append_audit_event
from .concurrency import run_with_retry
from .session_service import ActorContext
from barbershop.time_utils import utcnow


def _require_admin(actor: ActorContext) -> None:
    if not actor.is_admin:
        raise PermissionDenied("Only shop admins can manage expenses")


def record_expense(
    actor: ActorContext,
    *,
    description: str,
    amount_cents,
    type,
    category: str,
    day=None,
) -> Expense:
    """Record an expense (amount > 0). day defaults to today."""
    _require_admin(actor)
    data = {
        "description": require_text(description, "description", max_length=255),
        "amount_cents": coerce_cents(amount_cents, "amount_cents", minimum=1),
        "type": coerce_enum(ExpenseType, type, "type"),
        "category": coerce_choice(category, "category", EXPENSE_CATEGORIES),
        "date": coerce_date(day, "date") if day is not None else utcnow().date(),
        "created_by": actor.user_id,
        "created_by_name": actor.name,
    }

    def _op():
        now = utcnow()
        expense = store.create("expenses", actor.shop_id, dict(data, created_at=now))
        append_audit_event(
            shop_id=actor.shop_id,
            entity_type="expense",
            entity_id=expense.id,
            action="expense.recorded",
            actor_id=actor.user_id,
            occurred_at=now,
        )
        db.session.commit()
        return expense

    expense = run_with_retry(_op)
    current_app.logger.info("Expense %s recorded in shop %s", expense.id, actor.shop_id)
    return expense


def delete_expense(actor: ActorContext, expense_id: int) -> None:
    _require_admin(actor)

    def _op():
        store.require("expenses", actor.shop_id, expense_id)
        store.delete("expenses", actor.shop_id, expense_id)
        append_audit_event(
            shop_id=actor.shop_id,
            entity_type="expense",
            entity_id=expense_id,
            action="expense.deleted",
            actor_id=actor.user_id,
        )
        db.session.commit()

    run_with_retry(_op)


def list_expenses(
    actor: ActorContext,
    *,
    type=None,
    start: date | None = None,
    end: date | None = None,
) -> list[Expense]:
    """Expenses by date, newest first. start/end are inclusive dates."""
    _require_admin(actor)
    if type is not None:
        type = coerce_enum(ExpenseType, type, "type")
    conditions = []
    if start is not None:
        conditions.append(Expense.date >= start)
    if end is not None:
        conditions.append(Expense.date <= end)
    return store.query(
        "expenses",
        actor.shop_id,
        type=type,
        conditions=conditions,
        order_by=[Expense.date.desc(), Expense.id.desc()],
    )
