"""Users component models - frozen dataclass inputs and outputs."""

from __future__ import annotations

from dataclasses import dataclass

from src.domain.entities import Role, User


@dataclass(frozen=True)
class ListUsersInput:
    page: int = 1
    limit: int = 20
    role: Role | None = None
    search: str | None = None


@dataclass(frozen=True)
class UserSummary:
    """A user with the number of posts and comments they authored."""

    user: User
    posts_count: int
    comments_count: int


@dataclass(frozen=True)
class UserPage:
    users: list[UserSummary]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.limit else 0
