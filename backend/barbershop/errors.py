# Overview: Error taxonomy shared by services and routes.

"""
Barbershop error taxonomy.

Expected domain conditions (bad input, illegal lifecycle moves, conflicts)
are DomainError subclasses. Callers either catch them or go through
attempt(), which returns a tagged Outcome instead of raising.

StorageError is a fault, not a domain condition: it is what remains after
the retry budget in concurrency.run_with_retry is spent. It always
propagates, and it is safe to retry because every ledger write is a single
atomic statement or transaction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable


class DomainError(Exception):
    """Base for expected, typed domain conditions."""

    kind = "domain_error"
    retryable = False
    # Shown to users when nothing more specific is available
    default_message = "The operation could not be completed"

    def __init__(self, message: str | None = None, details: dict | None = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        payload = {
            "error": self.kind,
            "message": self.message,
            "retryable": self.retryable,
        }
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(DomainError):
    """Bad input shape or range. Never retried."""

    kind = "validation_error"
    default_message = "Some fields are missing or invalid"


class NotFound(DomainError):
    """Missing record, or a record owned by another shop."""

    kind = "not_found"
    default_message = "Record not found"


class PermissionDenied(DomainError):
    kind = "permission_denied"
    default_message = "You are not allowed to perform this action"


class ConflictError(DomainError):
    """Uniqueness or referential conflict, e.g. a duplicate barcode."""

    kind = "conflict"
    default_message = "The record conflicts with existing data"


class InvalidTransition(DomainError):
    """Illegal lifecycle move. Re-fetch the current state before retrying."""

    kind = "invalid_transition"

    def __init__(self, entity: str, from_state: str | None, to_state: str, message: str | None = None):
        self.entity = entity
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            message or f"Cannot move {entity} from '{from_state}' to '{to_state}'",
            details={"entity": entity, "from": from_state, "to": to_state},
        )


class InsufficientStock(DomainError):
    kind = "insufficient_stock"

    def __init__(self, product_id: int, requested: int, available: int):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Not enough stock: requested {requested}, available {available}",
            details={"product_id": product_id, "requested": requested, "available": available},
        )


class SlotTaken(DomainError):
    kind = "slot_taken"

    def __init__(self, barber_id: int, day: str, time: str):
        super().__init__(
            f"The {time} slot on {day} is already booked",
            details={"barber_id": barber_id, "date": day, "time": time},
        )


class AuthError(DomainError):
    kind = "auth_error"
    default_message = "Authentication failed"


class InvalidCredentials(AuthError):
    kind = "invalid_credentials"
    default_message = "Invalid email or password"


class EmailInUse(AuthError):
    kind = "email_in_use"
    default_message = "This email is already registered"


class WeakPassword(AuthError):
    kind = "weak_password"
    default_message = "Password must be at least 6 characters long"


class StorageError(Exception):
    """Transient storage failure left over after retries. Retryable."""

    kind = "storage_error"
    retryable = True

    def __init__(self, message: str = "Storage is temporarily unavailable, try again"):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"error": self.kind, "message": self.message, "retryable": True}


@dataclass
class Outcome:
    """Tagged result: value on success, a DomainError otherwise."""

    ok: bool
    value: Any = None
    error: DomainError | None = field(default=None)

    @property
    def kind(self) -> str:
        return "ok" if self.ok else self.error.kind


def attempt(fn: Callable, *args, **kwargs) -> Outcome:
    """
    Run a service call and capture expected domain conditions.

    Only DomainError is captured. StorageError and anything unclassified
    propagate to the caller as faults.
    """
    try:
        return Outcome(ok=True, value=fn(*args, **kwargs))
    except DomainError as exc:
        return Outcome(ok=False, error=exc)
