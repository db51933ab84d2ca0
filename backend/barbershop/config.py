# backend/barbershop/config.py
from __future__ import annotations
import os


def _int_env(name: str, default: int) -> int:
    return int(os.environ.get(name, default))


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/barbershop.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///barbershop.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Upper bound (seconds) for any single storage round trip: lock waits on
    # SQLite, pool checkout elsewhere.
    STORE_TIMEOUT_SECONDS = _int_env("STORE_TIMEOUT_SECONDS", 10)
    STORE_RETRY_ATTEMPTS = _int_env("STORE_RETRY_ATTEMPTS", 3)
    STORE_RETRY_BACKOFF = float(os.environ.get("STORE_RETRY_BACKOFF", "0.1"))

    # Appointment grid: 09:00-20:00 in 30 minute slots
    SCHEDULE_OPEN_HOUR = _int_env("SCHEDULE_OPEN_HOUR", 9)
    SCHEDULE_CLOSE_HOUR = _int_env("SCHEDULE_CLOSE_HOUR", 20)
    SCHEDULE_SLOT_MINUTES = _int_env("SCHEDULE_SLOT_MINUTES", 30)

    TOP_PRODUCTS_LIMIT = _int_env("TOP_PRODUCTS_LIMIT", 5)

    # bcrypt cost factor; tests lower it
    BCRYPT_ROUNDS = _int_env("BCRYPT_ROUNDS", 12)

    SESSION_ABSOLUTE_HOURS = _int_env("SESSION_ABSOLUTE_HOURS", 24)
    SESSION_IDLE_HOURS = _int_env("SESSION_IDLE_HOURS", 2)

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    CORS_ALLOWED_ORIGINS = {
        origin.strip()
        for origin in os.environ.get(
            "CORS_ALLOWED_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173",
        ).split(",")
        if origin.strip()
    }


def engine_options(database_uri: str, timeout_seconds: int) -> dict:
    """SQLAlchemy engine options bounding every storage call by a timeout."""
    if database_uri.startswith("sqlite"):
        return {"connect_args": {"timeout": timeout_seconds}}
    return {"pool_timeout": timeout_seconds, "pool_pre_ping": True}
