from __future__ import annotations

from ..extensions import db
from barbershop.time_utils import to_utc_z


class Shop(db.Model):
    """
    Multi-tenant root: every barbershop is a Shop.

    All users, services, haircuts, products, sales, expenses and
    appointments carry shop_id. No data may cross shop boundaries and a
    record's shop_id is never reassigned after creation.
    """
    __tablename__ = "shops"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)

    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)

    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<Shop id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
        }
