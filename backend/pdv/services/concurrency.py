# Overview: Transaction boundary and concurrency helpers shared by the services.

from __future__ import annotations

import time

from flask import current_app
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..errors import ConcurrentUpdateError
from ..extensions import db


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    The optimistic version_id counter on the locked models still catches a
    lost update there.
    """
    return query.with_for_update().populate_existing()


def _retry_settings(attempts, backoff_base):
    config = current_app.config
    if attempts is None:
        attempts = config.get("SALE_RETRY_ATTEMPTS", 3)
    if backoff_base is None:
        backoff_base = config.get("SALE_RETRY_BACKOFF", 0.1)
    return max(int(attempts), 1), float(backoff_base)


def run_with_retry(func, *, attempts: int | None = None, backoff_base: float | None = None):
    """
    Execute `func` as one unit of work.

    Any exception rolls the session back, so a failure midway leaves no partial
    writes behind. OperationalError (deadlocks, locks) and StaleDataError
    (optimistic locking conflicts) are transient: the whole operation is re-run
    with exponential backoff. Domain errors propagate immediately.
    """
    attempts, backoff_base = _retry_settings(attempts, backoff_base)
    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError) as exc:
            db.session.rollback()
            if attempt >= attempts - 1:
                if isinstance(exc, StaleDataError):
                    raise ConcurrentUpdateError(
                        "Record was modified concurrently, please retry",
                        details={"attempts": attempts},
                    ) from exc
                raise
            current_app.logger.warning(
                "Transient database conflict (attempt %s/%s): %s", attempt + 1, attempts, exc
            )
            time.sleep(backoff_base * (2 ** attempt))
        except Exception:
            db.session.rollback()
            raise
