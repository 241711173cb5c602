"""Slugs component models - tagged results of the bounded retry driver."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from src.core.ports.db import POST_SLUG, TAG_NAME, TAG_SLUG

T = TypeVar("T")

# Uniqueness races that a fresh attempt can resolve. The pending-request
# index is absent: that collision is a real conflict.
RETRYABLE_CONSTRAINTS = frozenset({POST_SLUG, TAG_SLUG, TAG_NAME})


@dataclass(frozen=True)
class Ok(Generic[T]):
    """The unit of work committed."""

    value: T
    attempts: int = 1


@dataclass(frozen=True)
class Retry:
    """The attempt lost a uniqueness race and was rolled back."""

    constraint: str


@dataclass(frozen=True)
class ExhaustedRetries:
    """Every allowed attempt lost a race."""

    attempts: int
    last_constraint: str
