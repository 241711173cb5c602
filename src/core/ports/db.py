"""
Persistence gateway interfaces.

Protocol-based interfaces for repository operations plus the unit of work
that scopes them to one atomic transaction.
Implementations: SQLite (now), Postgres (future).

Contract:
- Every repository handed out by a UnitOfWork runs inside that unit's
  transaction; leaving the `with` block commits, an exception rolls back.
- A duplicate key on a unique constraint surfaces as UniqueViolationError
  naming the constraint; every other storage failure propagates unchanged.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import dataclass
from types import TracebackType
from typing import Literal, Protocol
from uuid import UUID

from src.domain.entities import (
    Comment,
    Post,
    PostStatus,
    PublishRequest,
    PublishRequestStatus,
    Role,
    Tag,
    User,
)

# Constraint names reported by UniqueViolationError
POST_SLUG = "posts.slug"
TAG_NAME = "tags.name_key"
TAG_SLUG = "tags.slug"
PENDING_REQUEST = "publish_requests.post_id"

PostSortField = Literal["created_at", "updated_at", "published_at", "view_count", "title"]
SortOrder = Literal["asc", "desc"]


class UniqueViolationError(Exception):
    """A write collided with a unique constraint."""

    def __init__(self, constraint: str, message: str = "") -> None:
        self.constraint = constraint
        super().__init__(message or f"Unique constraint violated: {constraint}")


@dataclass(frozen=True)
class PostListQuery:
    """
    Storage-level post filter. Visibility has already been resolved by the
    caller: `visible_to` means "PUBLISHED, or authored by this user".
    """

    status: PostStatus | None = None
    author_id: UUID | None = None
    visible_to: UUID | None = None
    tag_slug: str | None = None
    is_featured: bool | None = None
    search: str | None = None
    sort_by: PostSortField = "created_at"
    sort_order: SortOrder = "desc"
    limit: int = 10
    offset: int = 0


@dataclass(frozen=True)
class UserListQuery:
    """Storage-level user filter. `search` matches name or email."""

    role: Role | None = None
    search: str | None = None
    limit: int = 20
    offset: int = 0


# -----------------------------------------------------------------------------
# Repositories
# -----------------------------------------------------------------------------


class UserRepoPort(Protocol):
    def get_by_id(self, user_id: UUID) -> User | None:
        ...

    def get_by_email(self, email: str) -> User | None:
        ...

    def save(self, user: User) -> User:
        """Insert or update (upsert)."""
        ...

    def list_with_counts(
        self, query: UserListQuery
    ) -> tuple[list[tuple[User, int, int]], int]:
        """A page of users, newest first, each with its post and comment counts; plus the total."""
        ...

    def count_content(self, user_id: UUID) -> tuple[int, int]:
        """Number of posts and comments the user authored."""
        ...


class PostRepoPort(Protocol):
    def get_by_id(self, post_id: UUID) -> Post | None:
        """Get a post with its tags."""
        ...

    def get_by_slug(self, slug: str) -> Post | None:
        ...

    def slug_owner(self, slug: str) -> UUID | None:
        """Id of the post holding this slug, if any."""
        ...

    def insert(self, post: Post) -> Post:
        ...

    def update(self, post: Post) -> Post:
        ...

    def delete(self, post_id: UUID) -> None:
        ...

    def replace_tags(self, post_id: UUID, tag_ids: list[UUID]) -> None:
        """Delete every association of the post, then create the given ones in order."""
        ...

    def increment_view_count(self, post_id: UUID) -> int:
        """Atomically add one view; returns the new count."""
        ...

    def list(self, query: PostListQuery) -> tuple[list[Post], int]:
        """Returns (page, total_matching)."""
        ...


class TagRepoPort(Protocol):
    def get_by_id(self, tag_id: UUID) -> Tag | None:
        ...

    def get_by_slug(self, slug: str) -> Tag | None:
        ...

    def get_by_name(self, name: str) -> Tag | None:
        """Case-insensitive lookup."""
        ...

    def slug_owner(self, slug: str) -> UUID | None:
        ...

    def insert(self, tag: Tag) -> Tag:
        ...

    def update(self, tag: Tag) -> Tag:
        ...

    def delete(self, tag_id: UUID) -> None:
        ...

    def count_posts(self, tag_id: UUID) -> int:
        ...

    def list_with_counts(self) -> list[tuple[Tag, int]]:
        """All tags ordered by name, each with its number of posts."""
        ...

    def list_published_posts(self, tag_id: UUID) -> list[Post]:
        ...


class PublishRequestRepoPort(Protocol):
    """Reads fill each request's `post` and `author` summaries; writes ignore them."""

    def get_by_id(self, request_id: UUID) -> PublishRequest | None:
        ...

    def get_pending_for_post(self, post_id: UUID) -> PublishRequest | None:
        ...

    def insert(self, request: PublishRequest) -> PublishRequest:
        ...

    def update(self, request: PublishRequest) -> PublishRequest:
        ...

    def delete(self, request_id: UUID) -> None:
        ...

    def list(
        self,
        *,
        status: PublishRequestStatus | None = None,
        author_id: UUID | None = None,
    ) -> list[PublishRequest]:
        """Newest first."""
        ...


class CommentRepoPort(Protocol):
    def get_by_id(self, comment_id: UUID) -> Comment | None:
        ...

    def insert(self, comment: Comment) -> Comment:
        ...

    def update(self, comment: Comment) -> Comment:
        ...

    def delete(self, comment_id: UUID) -> None:
        ...

    def list_for_post(self, post_id: UUID) -> list[Comment]:
        ...

    def list_by_author(self, author_id: UUID) -> list[Comment]:
        ...


# -----------------------------------------------------------------------------
# Unit of work
# -----------------------------------------------------------------------------


class UnitOfWork(Protocol):
    users: UserRepoPort
    posts: PostRepoPort
    tags: TagRepoPort
    publish_requests: PublishRequestRepoPort
    comments: CommentRepoPort

    def __enter__(self) -> UnitOfWork:
        ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        ...

    def savepoint(self) -> AbstractContextManager[None]:
        """Nested scope; an exception inside undoes only the nested writes."""
        ...


class UnitOfWorkFactory(Protocol):
    def __call__(self, *, read_only: bool = False) -> UnitOfWork:
        ...
