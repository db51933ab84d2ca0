from __future__ import annotations

from ..extensions import db
from barbershop.time_utils import to_utc_z


class AuditEvent(db.Model):
    """
    Append-only audit trail for status transitions and ledger writes.

    Written in the same DB transaction as the change it records; never
    updated or deleted.
    """
    __tablename__ = "audit_events"
    __table_args__ = (
        db.Index("ix_audit_events_entity", "entity_type", "entity_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    shop_id = db.Column(db.Integer, db.ForeignKey("shops.id"), nullable=False, index=True)

    entity_type = db.Column(db.String(32), nullable=False)
    entity_id = db.Column(db.Integer, nullable=False)
    action = db.Column(db.String(64), nullable=False)

    from_state = db.Column(db.String(16), nullable=True)
    to_state = db.Column(db.String(16), nullable=True)

    actor_id = db.Column(db.Integer, nullable=True)
    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False)
    note = db.Column(db.String(255), nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "shop_id": self.shop_id,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "action": self.action,
            "from_state": self.from_state,
            "to_state": self.to_state,
            "actor_id": self.actor_id,
            "occurred_at": to_utc_z(self.occurred_at),
            "note": self.note,
        }
