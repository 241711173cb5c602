from fastapi import APIRouter, Depends

from src.api.deps import get_current_user
from src.api.schemas import UserResponse
from src.domain.entities import User

router = APIRouter()


@router.get("", response_model=UserResponse)
def read_me(user: User = Depends(get_current_user)) -> UserResponse:
    """The user the bearer token resolves to."""
    return UserResponse.model_validate(user)
