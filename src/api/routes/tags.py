from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from src.api.deps import get_current_user, get_tag_service
from src.api.schemas import (
    PostSummaryResponse,
    TagCreateRequest,
    TagDetailResponse,
    TagResponse,
    TagUpdateRequest,
    TagWithCountResponse,
)
from src.components.tags import TagService
from src.domain.entities import User

router = APIRouter()


@router.get("", response_model=list[TagWithCountResponse])
def list_tags(service: TagService = Depends(get_tag_service)) -> list[TagWithCountResponse]:
    return [
        TagWithCountResponse(
            id=item.tag.id, name=item.tag.name, slug=item.tag.slug, posts_count=item.posts_count
        )
        for item in service.list_tags()
    ]


@router.get("/{slug}", response_model=TagDetailResponse)
def get_tag(slug: str, service: TagService = Depends(get_tag_service)) -> TagDetailResponse:
    """A tag with its published posts."""
    detail = service.get_tag(slug)
    return TagDetailResponse(
        id=detail.tag.id,
        name=detail.tag.name,
        slug=detail.tag.slug,
        posts=[PostSummaryResponse.model_validate(p) for p in detail.posts],
        posts_count=detail.posts_count,
    )


@router.post("", response_model=TagResponse, status_code=status.HTTP_201_CREATED)
def create_tag(
    req: TagCreateRequest,
    user: User = Depends(get_current_user),
    service: TagService = Depends(get_tag_service),
) -> TagResponse:
    return TagResponse.model_validate(service.create_tag(user, req.name))


@router.put("/{tag_id}", response_model=TagResponse)
def rename_tag(
    tag_id: UUID,
    req: TagUpdateRequest,
    user: User = Depends(get_current_user),
    service: TagService = Depends(get_tag_service),
) -> TagResponse:
    return TagResponse.model_validate(service.rename_tag(user, tag_id, req.name))


@router.delete("/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_tag(
    tag_id: UUID,
    user: User = Depends(get_current_user),
    service: TagService = Depends(get_tag_service),
) -> Response:
    service.delete_tag(user, tag_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
