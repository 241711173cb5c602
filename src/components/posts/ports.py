"""Posts component port definitions - protocols for dependencies."""

from collections.abc import Iterable
from datetime import datetime
from typing import Protocol

from src.core.ports.db import UnitOfWork
from src.domain.entities import Tag, User


class PolicyPort(Protocol):
    """Protocol for role gates."""

    def require(self, user: User | None, action: str) -> None:
        """Raise ForbiddenError unless the action is allowed."""
        ...


class TagResolverPort(Protocol):
    """Protocol for turning tag names into Tag rows inside a unit of work."""

    def resolve_all(self, uow: UnitOfWork, names: Iterable[str]) -> list[Tag]:
        """Get or create each tag, de-duplicated, in order."""
        ...


class ClockPort(Protocol):
    """Protocol for time operations."""

    def now_utc(self) -> datetime:
        """Return current UTC time."""
        ...
