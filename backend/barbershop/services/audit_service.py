# Overview: Append-only audit trail for transitions and ledger writes.

"""
Audit trail invariants

- Append-only: no updates or deletes of existing events.
- Events are written inside the same DB transaction as the change they
  record, so a rolled-back change leaves no event behind.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..models import AuditEvent
from . import store
from barbershop.time_utils import utcnow


def append_audit_event(
    *,
    shop_id: int,
    entity_type: str,
    entity_id: int,
    action: str,
    actor_id: int | None = None,
    from_state: str | None = None,
    to_state: str | None = None,
    note: Optional[str] = None,
    occurred_at: Optional[datetime] = None,
) -> AuditEvent:
    """Append an audit event. Flushes, never commits."""
    return store.create(
        "audit_events",
        shop_id,
        {
            "entity_type": entity_type,
            "entity_id": entity_id,
            "action": action,
            "actor_id": actor_id,
            "from_state": from_state,
            "to_state": to_state,
            "note": note,
            "occurred_at": occurred_at or utcnow(),
        },
    )


def list_audit_events(
    shop_id: int,
    *,
    entity_type: str | None = None,
    entity_id: int | None = None,
    limit: int = 200,
) -> list[AuditEvent]:
    return store.query(
        "audit_events",
        shop_id,
        entity_type=entity_type,
        entity_id=entity_id,
        order_by=[AuditEvent.occurred_at.desc(), AuditEvent.id.desc()],
        limit=limit,
    )
