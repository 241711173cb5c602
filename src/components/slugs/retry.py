"""
Bounded retry driver.

Runs a transactional body against a fresh unit of work per attempt. A unique
violation on a retryable constraint rolls the attempt back and starts over, so
slug generation re-reads the table and picks the next free suffix. Anything
else propagates after rollback.
"""

from __future__ import annotations

import logging
from typing import TypeVar

from src.components.slugs.models import RETRYABLE_CONSTRAINTS, ExhaustedRetries, Ok, Retry
from src.components.slugs.ports import UnitOfWorkBody
from src.core.ports.db import UniqueViolationError, UnitOfWorkFactory
from src.domain.errors import ConflictError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def attempt_once(uow_factory: UnitOfWorkFactory, work: UnitOfWorkBody[T]) -> Ok[T] | Retry:
    try:
        with uow_factory() as uow:
            value = work(uow)
    except UniqueViolationError as e:
        if e.constraint not in RETRYABLE_CONSTRAINTS:
            raise
        return Retry(constraint=e.constraint)
    return Ok(value=value)


def run_with_retry(
    uow_factory: UnitOfWorkFactory,
    work: UnitOfWorkBody[T],
    max_attempts: int,
) -> Ok[T] | ExhaustedRetries:
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    last_constraint = ""
    for attempt in range(1, max_attempts + 1):
        result = attempt_once(uow_factory, work)
        if isinstance(result, Ok):
            return Ok(value=result.value, attempts=attempt)

        last_constraint = result.constraint
        logger.info(
            "Unique violation on %s (attempt %d/%d), retrying",
            result.constraint,
            attempt,
            max_attempts,
        )

    logger.warning(
        "Giving up after %d attempts; last violation on %s", max_attempts, last_constraint
    )
    return ExhaustedRetries(attempts=max_attempts, last_constraint=last_constraint)


def commit_with_retry(
    uow_factory: UnitOfWorkFactory,
    work: UnitOfWorkBody[T],
    max_attempts: int,
) -> T:
    """Run work to commit or raise ConflictError once the budget is spent."""
    result = run_with_retry(uow_factory, work, max_attempts)
    if isinstance(result, ExhaustedRetries):
        raise ConflictError(
            f"Could not allocate a unique identifier after {result.attempts} attempts"
        )
    return result.value
