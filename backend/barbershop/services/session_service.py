# Overview: Service-layer operations for session; encapsulates business logic and database work.

"""
Session Token Management Service

WHY: Secure session management with automatic timeout and revocation.
Tokens are cryptographically secure, hashed in database, and time-limited.

TENANCY: Sessions capture shop_id at creation time. The ActorContext built
from a session is passed explicitly into every domain call; services never
read ambient request state.

SECURITY FEATURES:
- Cryptographically secure random tokens (32 bytes)
- Tokens hashed with SHA-256 before storage
- Absolute timeout (SESSION_ABSOLUTE_HOURS, default 24h)
- Idle timeout (SESSION_IDLE_HOURS, default 2h)
- Revocable on sign-out
- scoped_session(): short-lived secondary sessions with guaranteed teardown
"""

from __future__ import annotations

import hashlib
import secrets
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import timedelta
from typing import Iterator

from flask import current_app

from ..extensions import db
from ..models import SessionToken, User, Shop, Role, BarberStatus
from .concurrency import run_with_retry
from barbershop.time_utils import utcnow


@dataclass(frozen=True)
class ActorContext:
    """
    Who is acting, and in which shop.

    Built once per request from the validated session and threaded through
    every service call. shop_id is the tenancy boundary for the call.
    """
    user_id: int
    shop_id: int
    role: Role
    name: str
    status: BarberStatus = BarberStatus.ACTIVE

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_barber(self) -> bool:
        return self.role == Role.BARBER


def actor_from_user(user: User) -> ActorContext:
    return ActorContext(
        user_id=user.id,
        shop_id=user.shop_id,
        role=user.role,
        name=user.name,
        status=user.status,
    )


@dataclass
class SessionContext:
    """Validated session plus the actor it authenticates."""
    user: User
    session: SessionToken
    actor: ActorContext


def generate_token() -> str:
    """64-character hex string (32 bytes of entropy)."""
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    """SHA-256 is enough for high-entropy tokens."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _timeouts() -> tuple[timedelta, timedelta]:
    cfg = current_app.config
    return (
        timedelta(hours=cfg.get("SESSION_ABSOLUTE_HOURS", 24)),
        timedelta(hours=cfg.get("SESSION_IDLE_HOURS", 2)),
    )


def create_session(user_id: int) -> tuple[SessionToken, str]:
    """
    Create new session token for user with tenant context.

    Returns (session_record, plaintext_token). The database stores only
    the hash.
    """
    def _op():
        user = db.session.get(User, user_id)
        if user is None:
            raise ValueError("User not found")

        shop = db.session.get(Shop, user.shop_id)
        if shop is None or not shop.is_active:
            raise ValueError("Shop is not active")

        absolute_timeout, _ = _timeouts()
        plaintext_token = generate_token()
        now = utcnow()

        session = SessionToken(
            user_id=user.id,
            shop_id=user.shop_id,
            token_hash=hash_token(plaintext_token),
            created_at=now,
            last_used_at=now,
            expires_at=now + absolute_timeout,
            is_revoked=False,
        )
        db.session.add(session)
        db.session.commit()
        return session, plaintext_token

    return run_with_retry(_op)


def validate_session(token: str) -> SessionContext | None:
    """
    Validate session token and return SessionContext if valid.

    Returns None if the token is unknown, revoked, past its absolute or idle
    timeout, or if its shop no longer matches the user's shop or is deactivated.
    """
    def _op():
        session = db.session.query(SessionToken).filter_by(token_hash=hash_token(token)).first()
        if session is None or session.is_revoked:
            return None

        now = utcnow()
        _, idle_timeout = _timeouts()
        if now > session.expires_at:
            _revoke(session, "expired")
            db.session.commit()
            return None
        if now - session.last_used_at > idle_timeout:
            _revoke(session, "idle_timeout")
            db.session.commit()
            return None

        user = db.session.get(User, session.user_id)
        if user is None or user.shop_id != session.shop_id:
            return None

        shop = db.session.get(Shop, session.shop_id)
        if shop is None or not shop.is_active:
            return None

        session.last_used_at = now
        db.session.commit()
        return SessionContext(user=user, session=session, actor=actor_from_user(user))

    return run_with_retry(_op)


def revoke_session(token: str, reason: str = "sign_out") -> bool:
    """Revoke a session by plaintext token. Returns False if unknown."""
    def _op():
        session = db.session.query(SessionToken).filter_by(token_hash=hash_token(token)).first()
        if session is None:
            return False
        if not session.is_revoked:
            _revoke(session, reason)
            db.session.commit()
        return True

    return run_with_retry(_op)


def _revoke(session: SessionToken, reason: str) -> None:
    session.is_revoked = True
    session.revoked_at = utcnow()
    session.revoked_reason = reason


@contextmanager
def scoped_session(user_id: int) -> Iterator[SessionContext]:
    """
    Issue an isolated session for user_id and always sign it out on exit.

    Used when an admin provisions a barber login: the admin's own session is
    untouched, and the secondary credentials never outlive the block, on the
    success path and the failure path alike.
    """
    _, token = create_session(user_id)
    try:
        context = validate_session(token)
        if context is None:
            raise ValueError("Secondary session could not be established")
        yield context
    finally:
        try:
            revoke_session(token, reason="scoped_session_end")
        except Exception:
            current_app.logger.exception("Failed to tear down secondary session for user %s", user_id)
            raise
