"""Comments component port definitions - protocols for dependencies."""

from datetime import datetime
from typing import Protocol

from src.domain.entities import User


class PolicyPort(Protocol):
    """Protocol for role gates."""

    def require(self, user: User | None, action: str) -> None:
        """Raise ForbiddenError unless the action is allowed."""
        ...


class ClockPort(Protocol):
    """Protocol for time operations."""

    def now_utc(self) -> datetime:
        """Return current UTC time."""
        ...
