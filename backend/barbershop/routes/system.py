# backend/barbershop/routes/system.py
"""
System health endpoint.

Reports database reachability and session table state for deployment
debugging. Answers 503 when the database cannot be queried.
"""

import time
from flask import Blueprint, current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import Shop, User, SessionToken
from barbershop.time_utils import utcnow

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    start_time = time.time()
    try:
        shop_count = db.session.query(Shop).count()
        user_count = db.session.query(User).count()
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {"shops": shop_count, "users": user_count},
        }
    except SQLAlchemyError:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        db.session.rollback()
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error",
        }


def check_session_service_health() -> dict:
    """Live sessions, and sessions past expiry that were never revoked."""
    start_time = time.time()
    try:
        active_sessions = db.session.query(SessionToken).filter_by(is_revoked=False).count()
        expired_sessions = db.session.query(SessionToken).filter(
            SessionToken.expires_at < utcnow(),
            SessionToken.is_revoked.is_(False),
        ).count()
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "active_sessions": active_sessions,
                "expired_pending_cleanup": expired_sessions,
            },
        }
    except SQLAlchemyError:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Session service health check failed")
        db.session.rollback()
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Session service error",
        }


@system_bp.get("/health")
def health():
    """
    Returns:
    - 200: all checks healthy
    - 503: one or more checks unhealthy
    """
    start_time = time.time()

    database_health = check_database_health()
    session_health = check_session_service_health()

    unhealthy = any(c["status"] == "unhealthy" for c in (database_health, session_health))

    response = {
        "status": "unhealthy" if unhealthy else "healthy",
        "timestamp": utcnow().isoformat() + "Z",
        "total_latency_ms": round((time.time() - start_time) * 1000, 2),
        "checks": {
            "database": database_health,
            "session_service": session_health,
        },
    }
    return response, 503 if unhealthy else 200
