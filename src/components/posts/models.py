"""Posts component models - frozen dataclass inputs and outputs."""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from src.core.ports.db import PostSortField, SortOrder
from src.domain.entities import Post, PostStatus


@dataclass(frozen=True)
class CreatePostInput:
    """Input for creating a draft post."""

    title: str
    content: str
    excerpt: str | None = None
    cover_image: str | None = None
    is_featured: bool = False
    tags: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class UpdatePostInput:
    """Partial update. None means "leave unchanged"; a tags list replaces the whole set."""

    title: str | None = None
    content: str | None = None
    excerpt: str | None = None
    cover_image: str | None = None
    is_featured: bool | None = None
    tags: list[str] | None = None


@dataclass(frozen=True)
class ListPostsInput:
    """Filters, sorting and pagination for post listings."""

    page: int = 1
    limit: int | None = None
    status: PostStatus | None = None
    author_id: UUID | None = None
    tag_slug: str | None = None
    is_featured: bool | None = None
    search: str | None = None
    sort_by: PostSortField = "created_at"
    sort_order: SortOrder = "desc"


@dataclass(frozen=True)
class PostPage:
    """One page of posts."""

    posts: list[Post]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.limit else 0
