import unicodedata
from datetime import UTC, datetime
from typing import Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

# --- Enums / Literals ---
Role = Literal["READER", "AUTHOR", "ADMIN"]
PostStatus = Literal["DRAFT", "PENDING_APPROVAL", "PUBLISHED", "ARCHIVED"]
PublishRequestStatus = Literal["PENDING", "APPROVED", "REJECTED"]


def utcnow() -> datetime:
    return datetime.now(UTC)


# --- Users ---

class User(BaseModel):
    """A resolved actor. Identity is issued elsewhere; the core only reads id and role."""

    id: UUID = Field(default_factory=uuid4)
    email: str
    name: str | None = None
    role: Role = "READER"
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


# --- Tags ---

def tag_name_key(name: str) -> str:
    """Case-insensitive identity of a tag name (full Unicode case folding)."""
    return unicodedata.normalize("NFC", name).casefold()


class Tag(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    name: str
    slug: str
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def name_key(self) -> str:
        return tag_name_key(self.name)


# --- Posts ---

class Post(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    title: str
    slug: str
    content: str
    excerpt: str | None = None
    cover_image: str | None = None
    status: PostStatus = "DRAFT"
    view_count: int = 0
    is_featured: bool = False
    published_at: datetime | None = None

    author_id: UUID
    tags: list[Tag] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


# --- Editorial workflow ---

class PostBrief(BaseModel):
    """The post fields a reviewer needs to judge a publish request."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    slug: str
    excerpt: str | None = None
    cover_image: str | None = None
    status: PostStatus


class AuthorBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str | None = None
    email: str


class PublishRequest(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    post_id: UUID
    author_id: UUID
    status: PublishRequestStatus = "PENDING"
    message: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    # Read-side summaries attached by the repository; writes ignore them.
    post: PostBrief | None = None
    author: AuthorBrief | None = None


# --- Comments ---

class Comment(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    post_id: UUID
    author_id: UUID
    content: str
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
