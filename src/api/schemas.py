from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

# --- Shared Enums/Types ---
PostStatus = Literal["DRAFT", "PENDING_APPROVAL", "PUBLISHED", "ARCHIVED"]
PublishRequestStatus = Literal["PENDING", "APPROVED", "REJECTED"]
Role = Literal["READER", "AUTHOR", "ADMIN"]


# --- Errors ---
class ErrorResponse(BaseModel):
    error: str
    message: str
    field: str | None = None


# --- Users ---
class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    name: str | None = None
    role: Role


class UserDetailResponse(UserResponse):
    posts_count: int
    comments_count: int
    created_at: datetime
    updated_at: datetime


class RoleUpdateRequest(BaseModel):
    role: Role


# --- Tags ---
class TagResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    slug: str


class TagWithCountResponse(TagResponse):
    posts_count: int


class TagCreateRequest(BaseModel):
    name: str


class TagUpdateRequest(BaseModel):
    name: str


# --- Posts ---
class PostCreateRequest(BaseModel):
    title: str
    content: str
    excerpt: str | None = None
    cover_image: str | None = None
    is_featured: bool = False
    tags: list[str] = Field(default_factory=list)


class PostUpdateRequest(BaseModel):
    title: str | None = None
    content: str | None = None
    excerpt: str | None = None
    cover_image: str | None = None
    is_featured: bool | None = None
    tags: list[str] | None = None


class PostSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    slug: str
    excerpt: str | None = None
    cover_image: str | None = None
    status: PostStatus
    view_count: int
    is_featured: bool
    published_at: datetime | None = None
    author_id: UUID
    tags: list[TagResponse] = []
    created_at: datetime
    updated_at: datetime


class PostResponse(PostSummaryResponse):
    content: str


class PaginationResponse(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class PostListResponse(BaseModel):
    posts: list[PostSummaryResponse]
    pagination: PaginationResponse


class UserListResponse(BaseModel):
    users: list[UserDetailResponse]
    pagination: PaginationResponse


class TagDetailResponse(TagResponse):
    posts: list[PostSummaryResponse]
    posts_count: int


# --- Publish workflow ---
class PublishRequestCreate(BaseModel):
    message: str | None = None


class ApproveRequest(BaseModel):
    message: str | None = None


class RejectRequest(BaseModel):
    message: str


class PostBriefResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    slug: str
    excerpt: str | None = None
    cover_image: str | None = None
    status: PostStatus


class AuthorBriefResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str | None = None
    email: str


class PublishRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    post_id: UUID
    author_id: UUID
    status: PublishRequestStatus
    message: str | None = None
    created_at: datetime
    updated_at: datetime
    post: PostBriefResponse | None = None
    author: AuthorBriefResponse | None = None


# --- Comments ---
class CommentCreateRequest(BaseModel):
    content: str


class CommentUpdateRequest(BaseModel):
    content: str


class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    post_id: UUID
    author_id: UUID
    content: str
    created_at: datetime
    updated_at: datetime
