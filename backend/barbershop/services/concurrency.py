# Overview: Retry helper shared by service-layer writes.

from __future__ import annotations

import time

from flask import current_app
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..errors import StorageError
from ..extensions import db


def run_with_retry(func, *, attempts: int | None = None, backoff_base: float | None = None):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, lock timeouts, dropped
    connections) and StaleDataError (optimistic locking conflicts). The
    session is rolled back before every retry, and on any other exception,
    so no partial write survives.
    Once attempts are exhausted the failure surfaces as StorageError.
    """
    if attempts is None:
        attempts = current_app.config.get("STORE_RETRY_ATTEMPTS", 3)
    if backoff_base is None:
        backoff_base = current_app.config.get("STORE_RETRY_BACKOFF", 0.1)

    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError) as exc:
            db.session.rollback()
            current_app.logger.warning(
                "Storage attempt %d/%d failed: %s", attempt + 1, attempts, exc.__class__.__name__
            )
            if attempt >= attempts - 1:
                raise StorageError() from exc
            time.sleep(backoff_base * (2 ** attempt))
        except Exception:
            # Domain errors abort the unit of work as a whole
            db.session.rollback()
            raise
    raise StorageError()

