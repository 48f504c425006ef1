"""SQLAlchemy session helpers.

SQLite holds a database-wide write lock for the length of a transaction, so a
commit racing another writer can fail with ``database is locked``.
:func:`safe_commit` retries such commits with exponential backoff.
"""

from __future__ import annotations

import logging
import time

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.session import Session

logger = logging.getLogger(__name__)

LOCKED_MESSAGES = ("database is locked", "database is busy")


def _is_lock_error(error: OperationalError) -> bool:
    message = str(error).lower()
    return any(token in message for token in LOCKED_MESSAGES)


def safe_commit(
    session: Session,
    retries: int = 5,
    initial_delay: float = 0.1,
) -> None:
    """Commit ``session``, retrying while SQLite reports a lock.

    Raises:
        OperationalError: when retries are exhausted or the failure is not a
            lock error. The session is rolled back first.
    """
    delay = initial_delay
    for attempt in range(retries):
        try:
            session.commit()
            return
        except OperationalError as exc:  # pragma: no cover - needs a concurrent writer
            session.rollback()
            if attempt == retries - 1 or not _is_lock_error(exc):
                raise
            logger.warning("Commit hit a locked database, retrying in %.2fs (attempt %d)", delay, attempt + 1)
            time.sleep(delay)
            delay *= 2
