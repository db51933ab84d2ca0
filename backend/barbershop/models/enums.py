"""
Closed status vocabularies.

Stored as their lowercase string values (non-native enums) so rows stay
readable and the partial index on appointments can match on the literal.
Only services/lifecycle_service.py moves a record between states.
"""

from __future__ import annotations

import enum

from ..extensions import db


class Role(str, enum.Enum):
    ADMIN = "admin"
    BARBER = "barber"


class BarberStatus(str, enum.Enum):
    PENDING = "pending"
    ACTIVE = "active"
    INACTIVE = "inactive"
    REJECTED = "rejected"


class HaircutStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    REJECTED = "rejected"


class ApprovalStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    CARD = "card"
    TRANSFER = "transfer"


class AppointmentStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ExpenseType(str, enum.Enum):
    MONTHLY = "monthly"
    UNEXPECTED = "unexpected"


EXPENSE_CATEGORIES = (
    "utilities",
    "rent",
    "salary",
    "supplies",
    "marketing",
    "maintenance",
    "unexpected",
    "other",
)

PRODUCT_CATEGORIES = (
    "drinks",
    "hair_products",
    "beard_products",
    "accessories",
    "other",
)


def enum_column(enum_cls, **kwargs):
    """Column storing enum *values* ("pending"), not member names."""
    return db.Column(
        db.Enum(
            enum_cls,
            native_enum=False,
            length=16,
            validate_strings=True,
            values_callable=lambda members: [m.value for m in members],
        ),
        **kwargs,
    )
