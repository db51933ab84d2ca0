from __future__ import annotations

from ..extensions import db
from .enums import ExpenseType, enum_column
from barbershop.time_utils import to_utc_z


class Expense(db.Model):
    """Shop expense. Immutable once created; corrections are delete-only."""
    __tablename__ = "expenses"
    __table_args__ = (
        db.CheckConstraint("amount_cents > 0", name="ck_expenses_amount_pos"),
        db.Index("ix_expenses_shop_date", "shop_id", "date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    shop_id = db.Column(db.Integer, db.ForeignKey("shops.id"), nullable=False, index=True)

    description = db.Column(db.String(255), nullable=False)
    amount_cents = db.Column(db.Integer, nullable=False)
    type = enum_column(ExpenseType, nullable=False)
    category = db.Column(db.String(32), nullable=False)
    date = db.Column(db.Date, nullable=False)

    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    created_by_name = db.Column(db.String(120), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "shop_id": self.shop_id,
            "description": self.description,
            "amount_cents": self.amount_cents,
            "type": self.type.value,
            "category": self.category,
            "date": self.date.isoformat(),
            "created_by": self.created_by,
            "created_by_name": self.created_by_name,
            "created_at": to_utc_z(self.created_at),
        }
