# Overview: Service-layer operations for reporting; encapsulates business logic and database work.

"""
Reporting Aggregator

The *_totals functions, pending_queue and barber_earnings are pure
derivations over record lists the caller already fetched: no I/O, no clock.
Computing them twice over the same records gives the same result.

shop_dashboard / barber_dashboard fetch the records for the actor's shop and
feed them through the pure functions.

Money is integer cents throughout.
"""

from __future__ import annotations

from collections import Counter
from datetime import date, datetime
from typing import Iterable

from ..errors import PermissionDenied
from ..models import Expense, HaircutStatus, ApprovalStatus, ExpenseType, BarberStatus, Role
from . import store
from .session_service import ActorContext
from barbershop.time_utils import day_range, month_range


def _totals(haircuts: Iterable, start: datetime, end: datetime) -> dict:
    total = 0
    count = 0
    for h in haircuts:
        if h.status != HaircutStatus.COMPLETED:
            continue
        if not (start <= h.created_at < end):
            continue
        total += h.price_cents
        count += 1
    return {"total_cents": total, "count": count}


def daily_totals(haircuts: Iterable, day: date) -> dict:
    """Completed haircuts created on day: summed price and count."""
    start, end = day_range(day)
    return _totals(haircuts, start, end)


def monthly_totals(haircuts: Iterable, month: date) -> dict:
    """Completed haircuts created in the calendar month containing month."""
    start, end = month_range(month.year, month.month)
    return _totals(haircuts, start, end)


def pending_queue(haircuts: Iterable) -> list:
    """Records awaiting approval, newest first. Ties keep their input order."""
    pending = [h for h in haircuts if h.approval_status == ApprovalStatus.PENDING]
    return sorted(pending, key=lambda h: h.created_at, reverse=True)


def expense_totals(expenses: Iterable) -> dict:
    """
    Sums grouped by expense type.

    average_monthly_cents is total_monthly / count(monthly), rounded to whole
    cents, and 0 when there are no monthly expenses.
    """
    sums = {ExpenseType.MONTHLY: 0, ExpenseType.UNEXPECTED: 0}
    counts = {ExpenseType.MONTHLY: 0, ExpenseType.UNEXPECTED: 0}
    for e in expenses:
        sums[e.type] += e.amount_cents
        counts[e.type] += 1

    monthly_count = counts[ExpenseType.MONTHLY]
    average = round(sums[ExpenseType.MONTHLY] / monthly_count) if monthly_count else 0
    return {
        "total_monthly_cents": sums[ExpenseType.MONTHLY],
        "total_unexpected_cents": sums[ExpenseType.UNEXPECTED],
        "total_cents": sums[ExpenseType.MONTHLY] + sums[ExpenseType.UNEXPECTED],
        "monthly_count": monthly_count,
        "unexpected_count": counts[ExpenseType.UNEXPECTED],
        "average_monthly_cents": average,
    }


def barber_earnings(haircuts: Iterable, barber_id: int) -> dict:
    """One barber's approved earnings versus what still awaits approval."""
    result = {
        "approved_cents": 0,
        "approved_count": 0,
        "pending_cents": 0,
        "pending_count": 0,
        "rejected_count": 0,
    }
    for h in haircuts:
        if h.barber_id != barber_id:
            continue
        if h.status == HaircutStatus.COMPLETED:
            result["approved_cents"] += h.price_cents
            result["approved_count"] += 1
        elif h.status == HaircutStatus.PENDING:
            result["pending_cents"] += h.price_cents
            result["pending_count"] += 1
        else:
            result["rejected_count"] += 1
    return result


def shop_dashboard(actor: ActorContext, today: date) -> dict:
    """Admin overview of one shop as of today."""
    if not actor.is_admin:
        raise PermissionDenied("Only shop admins can view the shop dashboard")

    haircuts = store.query("haircuts", actor.shop_id)
    barbers = store.query("users", actor.shop_id, role=Role.BARBER)
    month_start, month_end = month_range(today.year, today.month)
    month_expenses = store.query(
        "expenses",
        actor.shop_id,
        conditions=[Expense.date >= month_start.date(), Expense.date < month_end.date()],
    )

    by_status = Counter(b.status for b in barbers)
    return {
        "barbers": {status.value: by_status.get(status, 0) for status in BarberStatus},
        "today": daily_totals(haircuts, today),
        "month": monthly_totals(haircuts, today),
        "pending": [h.to_dict() for h in pending_queue(haircuts)],
        "expenses_month": expense_totals(month_expenses),
    }


def barber_dashboard(actor: ActorContext, today: date) -> dict:
    """A barber's own figures: today, this month, and approved vs pending."""
    haircuts = store.query("haircuts", actor.shop_id, barber_id=actor.user_id)
    return {
        "status": actor.status.value,
        "today": daily_totals(haircuts, today),
        "month": monthly_totals(haircuts, today),
        "earnings": barber_earnings(haircuts, actor.user_id),
        "recent": [h.to_dict() for h in sorted(haircuts, key=lambda h: h.created_at, reverse=True)[:10]],
    }
