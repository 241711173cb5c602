from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from src.api.deps import get_current_user, get_optional_user, get_post_service
from src.api.schemas import (
    PaginationResponse,
    PostCreateRequest,
    PostListResponse,
    PostResponse,
    PostStatus,
    PostSummaryResponse,
    PostUpdateRequest,
)
from src.components.posts import CreatePostInput, ListPostsInput, PostService, UpdatePostInput
from src.core.ports.db import PostSortField, SortOrder
from src.domain.entities import User

router = APIRouter()


@router.get("", response_model=PostListResponse)
def list_posts(
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    status_filter: PostStatus | None = Query(None, alias="status"),
    author_id: UUID | None = None,
    tag: str | None = None,
    featured: bool | None = None,
    search: str | None = None,
    sort_by: PostSortField = "created_at",
    sort_order: SortOrder = "desc",
    user: User | None = Depends(get_optional_user),
    service: PostService = Depends(get_post_service),
) -> PostListResponse:
    """List posts visible to the caller."""
    result = service.list_posts(
        user,
        ListPostsInput(
            page=page,
            limit=limit,
            status=status_filter,
            author_id=author_id,
            tag_slug=tag,
            is_featured=featured,
            search=search,
            sort_by=sort_by,
            sort_order=sort_order,
        ),
    )
    return PostListResponse(
        posts=[PostSummaryResponse.model_validate(p) for p in result.posts],
        pagination=PaginationResponse(
            page=result.page,
            limit=result.limit,
            total=result.total,
            total_pages=result.total_pages,
        ),
    )


@router.get("/by-id/{post_id}", response_model=PostResponse)
def get_post_for_edit(
    post_id: UUID,
    user: User = Depends(get_current_user),
    service: PostService = Depends(get_post_service),
) -> PostResponse:
    """Get a post by id for editing (owner or admin)."""
    return PostResponse.model_validate(service.get_post_for_edit(user, post_id))


@router.get("/{slug}", response_model=PostResponse)
def get_post(
    slug: str,
    user: User | None = Depends(get_optional_user),
    service: PostService = Depends(get_post_service),
) -> PostResponse:
    """Read a post by slug; published reads count a view."""
    return PostResponse.model_validate(service.get_post_by_slug(slug, user))


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
def create_post(
    req: PostCreateRequest,
    user: User = Depends(get_current_user),
    service: PostService = Depends(get_post_service),
) -> PostResponse:
    post = service.create_post(
        user,
        CreatePostInput(
            title=req.title,
            content=req.content,
            excerpt=req.excerpt,
            cover_image=req.cover_image,
            is_featured=req.is_featured,
            tags=req.tags,
        ),
    )
    return PostResponse.model_validate(post)


@router.put("/{post_id}", response_model=PostResponse)
def update_post(
    post_id: UUID,
    req: PostUpdateRequest,
    user: User = Depends(get_current_user),
    service: PostService = Depends(get_post_service),
) -> PostResponse:
    post = service.update_post(
        user,
        post_id,
        UpdatePostInput(
            title=req.title,
            content=req.content,
            excerpt=req.excerpt,
            cover_image=req.cover_image,
            is_featured=req.is_featured,
            tags=req.tags,
        ),
    )
    return PostResponse.model_validate(post)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_post(
    post_id: UUID,
    user: User = Depends(get_current_user),
    service: PostService = Depends(get_post_service),
) -> Response:
    service.delete_post(user, post_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
