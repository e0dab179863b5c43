"""Bounded retry of read-modify-write units on optimistic-concurrency conflicts."""

import logging
from typing import Callable, Optional, TypeVar

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from config import settings
from services.exceptions import ConflictError

T = TypeVar("T")
logger = logging.getLogger(__name__)


def run_with_write_retry(
    db: Session,
    operation: Callable[[], T],
    *,
    retries: Optional[int] = None,
    description: str = "write",
) -> T:
    """Run ``operation`` and commit, re-running it when a version check fails.

    ``operation`` must re-read everything it mutates: after a conflict the
    session is rolled back and every loaded instance is expired, so the
    next attempt sees the competing writer's state.

    Args:
        db: Database session.
        operation: Read-modify-write unit. Must not commit.
        retries: Extra attempts after the first (default
            settings.WRITE_CONFLICT_RETRIES).
        description: Used in log lines and the ConflictError message.

    Returns:
        Whatever ``operation`` returned on the successful attempt.

    Raises:
        ConflictError: every attempt lost the race.
    """
    retries = settings.WRITE_CONFLICT_RETRIES if retries is None else retries
    attempts = retries + 1

    for attempt in range(1, attempts + 1):
        try:
            result = operation()
            db.commit()
            return result
        except StaleDataError:
            db.rollback()
            logger.warning(
                "Version conflict during %s (attempt %d/%d)",
                description, attempt, attempts,
            )
        except Exception:
            db.rollback()
            raise

    raise ConflictError(
        f"Concurrent update conflict during {description}; gave up after {attempts} attempts",
        attempts=attempts,
    )
