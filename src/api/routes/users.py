from uuid import UUID

from fastapi import APIRouter, Depends, Query

from src.api.deps import get_current_user, get_user_service
from src.api.schemas import (
    PaginationResponse,
    Role,
    RoleUpdateRequest,
    UserDetailResponse,
    UserListResponse,
)
from src.components.users import ListUsersInput, UserService, UserSummary
from src.domain.entities import User

router = APIRouter()


def _detail(summary: UserSummary) -> UserDetailResponse:
    user = summary.user
    return UserDetailResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        role=user.role,
        posts_count=summary.posts_count,
        comments_count=summary.comments_count,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


@router.get("", response_model=UserListResponse)
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    role: Role | None = None,
    search: str | None = None,
    user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> UserListResponse:
    """All users, newest first (admin)."""
    result = service.list_users(
        user, ListUsersInput(page=page, limit=limit, role=role, search=search)
    )
    return UserListResponse(
        users=[_detail(s) for s in result.users],
        pagination=PaginationResponse(
            page=result.page,
            limit=result.limit,
            total=result.total,
            total_pages=result.total_pages,
        ),
    )


@router.get("/{user_id}", response_model=UserDetailResponse)
def get_user(
    user_id: UUID,
    user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> UserDetailResponse:
    return _detail(service.get_user(user, user_id))


@router.patch("/{user_id}/role", response_model=UserDetailResponse)
def set_role(
    user_id: UUID,
    req: RoleUpdateRequest,
    user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> UserDetailResponse:
    return _detail(service.set_role(user, user_id, req.role))
