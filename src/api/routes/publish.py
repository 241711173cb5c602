from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from src.api.deps import get_current_user, get_publish_service
from src.api.schemas import (
    ApproveRequest,
    PublishRequestCreate,
    PublishRequestResponse,
    PublishRequestStatus,
    RejectRequest,
)
from src.components.publish import PublishService
from src.domain.entities import User

router = APIRouter()


@router.post(
    "/posts/{post_id}/request",
    response_model=PublishRequestResponse,
    status_code=status.HTTP_201_CREATED,
)
def request_publish(
    post_id: UUID,
    req: PublishRequestCreate | None = None,
    user: User = Depends(get_current_user),
    service: PublishService = Depends(get_publish_service),
) -> PublishRequestResponse:
    message = req.message if req else None
    return PublishRequestResponse.model_validate(service.request_publish(user, post_id, message))


@router.get("/requests", response_model=list[PublishRequestResponse])
def list_requests(
    status_filter: PublishRequestStatus | None = Query(None, alias="status"),
    author_id: UUID | None = None,
    user: User = Depends(get_current_user),
    service: PublishService = Depends(get_publish_service),
) -> list[PublishRequestResponse]:
    """All publish requests (admin)."""
    requests = service.list_requests(user, status=status_filter, author_id=author_id)
    return [PublishRequestResponse.model_validate(r) for r in requests]


@router.get("/my-requests", response_model=list[PublishRequestResponse])
def list_my_requests(
    user: User = Depends(get_current_user),
    service: PublishService = Depends(get_publish_service),
) -> list[PublishRequestResponse]:
    return [PublishRequestResponse.model_validate(r) for r in service.list_my_requests(user)]


@router.post("/requests/{request_id}/approve", response_model=PublishRequestResponse)
def approve_request(
    request_id: UUID,
    req: ApproveRequest | None = None,
    user: User = Depends(get_current_user),
    service: PublishService = Depends(get_publish_service),
) -> PublishRequestResponse:
    message = req.message if req else None
    return PublishRequestResponse.model_validate(service.approve(user, request_id, message))


@router.post("/requests/{request_id}/reject", response_model=PublishRequestResponse)
def reject_request(
    request_id: UUID,
    req: RejectRequest,
    user: User = Depends(get_current_user),
    service: PublishService = Depends(get_publish_service),
) -> PublishRequestResponse:
    return PublishRequestResponse.model_validate(service.reject(user, request_id, req.message))


@router.delete("/requests/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
def cancel_request(
    request_id: UUID,
    user: User = Depends(get_current_user),
    service: PublishService = Depends(get_publish_service),
) -> Response:
    service.cancel(user, request_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
