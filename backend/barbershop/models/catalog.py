from __future__ import annotations

from ..extensions import db
from barbershop.time_utils import to_utc_z


class Service(db.Model):
    """
    A service offered by a shop (haircut, beard trim, ...).

    Price and duration are frozen once any HaircutRecord references the
    service; historical records keep their own price snapshot.
    """
    __tablename__ = "services"
    __table_args__ = (
        db.CheckConstraint("price_cents >= 0", name="ck_services_price_nonneg"),
        db.CheckConstraint("duration_minutes > 0", name="ck_services_duration_pos"),
        db.Index("ix_services_shop_active", "shop_id", "active"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    shop_id = db.Column(db.Integer, db.ForeignKey("shops.id"), nullable=False, index=True)

    name = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text, nullable=True)

    # Authoritative storage in cents
    price_cents = db.Column(db.Integer, nullable=False)
    duration_minutes = db.Column(db.Integer, nullable=False)

    active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<Service id={self.id} name={self.name!r} shop_id={self.shop_id}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "shop_id": self.shop_id,
            "name": self.name,
            "description": self.description,
            "price_cents": self.price_cents,
            "duration_minutes": self.duration_minutes,
            "active": self.active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
