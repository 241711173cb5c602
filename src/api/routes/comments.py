from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from src.api.deps import get_comment_service, get_current_user, get_optional_user
from src.api.schemas import CommentCreateRequest, CommentResponse, CommentUpdateRequest
from src.components.comments import CommentService
from src.domain.entities import User

router = APIRouter()


@router.get("/my-comments", response_model=list[CommentResponse])
def list_my_comments(
    user: User = Depends(get_current_user),
    service: CommentService = Depends(get_comment_service),
) -> list[CommentResponse]:
    return [CommentResponse.model_validate(c) for c in service.list_my_comments(user)]


@router.get("/posts/{post_id}", response_model=list[CommentResponse])
def list_comments(
    post_id: UUID,
    user: User | None = Depends(get_optional_user),
    service: CommentService = Depends(get_comment_service),
) -> list[CommentResponse]:
    return [CommentResponse.model_validate(c) for c in service.list_for_post(post_id, user)]


@router.post(
    "/posts/{post_id}", response_model=CommentResponse, status_code=status.HTTP_201_CREATED
)
def create_comment(
    post_id: UUID,
    req: CommentCreateRequest,
    user: User = Depends(get_current_user),
    service: CommentService = Depends(get_comment_service),
) -> CommentResponse:
    return CommentResponse.model_validate(service.create_comment(user, post_id, req.content))


@router.put("/{comment_id}", response_model=CommentResponse)
def update_comment(
    comment_id: UUID,
    req: CommentUpdateRequest,
    user: User = Depends(get_current_user),
    service: CommentService = Depends(get_comment_service),
) -> CommentResponse:
    return CommentResponse.model_validate(service.update_comment(user, comment_id, req.content))


@router.delete("/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_comment(
    comment_id: UUID,
    user: User = Depends(get_current_user),
    service: CommentService = Depends(get_comment_service),
) -> Response:
    service.delete_comment(user, comment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
