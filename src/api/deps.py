import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.adapters.clock import SystemClock
from src.adapters.sqlite.uow import SQLiteUnitOfWorkFactory
from src.api.auth_utils import decode_access_token
from src.components.comments import CommentService
from src.components.posts import PostService
from src.components.publish import PublishService
from src.components.tags import TagResolver, TagService
from src.components.users import UserService
from src.domain.entities import User
from src.domain.policy import PolicyEngine
from src.rules.loader import load_rules
from src.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("INKWELL_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "inkwell.db")
        self.rules_path = Path(os.environ.get("INKWELL_RULES_PATH", str(self.base_dir / "rules.yaml")))
        self.migrations_dir = str(self.base_dir / "migrations")
        self.db_timeout = float(os.environ.get("INKWELL_DB_TIMEOUT", "5"))


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return load_rules(settings.rules_path)


# --- Persistence ---
def get_uow_factory(settings: Settings = Depends(get_settings)) -> SQLiteUnitOfWorkFactory:
    return SQLiteUnitOfWorkFactory(settings.db_path, timeout=settings.db_timeout)


# Time adapter for deterministic time operations
_clock_instance: SystemClock | None = None


def get_clock() -> SystemClock:
    """Get clock singleton."""
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = SystemClock()
    return _clock_instance


# --- Services ---
def get_policy(rules: Rules = Depends(get_rules)) -> PolicyEngine:
    return PolicyEngine(rules.rbac)


def get_tag_resolver(
    rules: Rules = Depends(get_rules),
    clock: SystemClock = Depends(get_clock),
) -> TagResolver:
    return TagResolver(rules.content, clock)


def get_post_service(
    uow_factory: SQLiteUnitOfWorkFactory = Depends(get_uow_factory),
    resolver: TagResolver = Depends(get_tag_resolver),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> PostService:
    return PostService(uow_factory, resolver, policy, clock, rules)


def get_publish_service(
    uow_factory: SQLiteUnitOfWorkFactory = Depends(get_uow_factory),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> PublishService:
    return PublishService(uow_factory, policy, clock, rules.content)


def get_tag_service(
    uow_factory: SQLiteUnitOfWorkFactory = Depends(get_uow_factory),
    resolver: TagResolver = Depends(get_tag_resolver),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> TagService:
    return TagService(uow_factory, resolver, policy, clock, max_attempts=rules.slugs.max_attempts)


def get_comment_service(
    uow_factory: SQLiteUnitOfWorkFactory = Depends(get_uow_factory),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> CommentService:
    return CommentService(uow_factory, policy, clock, rules.content)


def get_user_service(
    uow_factory: SQLiteUnitOfWorkFactory = Depends(get_uow_factory),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
) -> UserService:
    return UserService(uow_factory, policy, clock)


# --- Auth ---
bearer_scheme = HTTPBearer(auto_error=False)


def _extract_token(
    request: Request, credentials: HTTPAuthorizationCredentials | None
) -> str | None:
    # 1. Cookie first (HttpOnly), with or without the "Bearer " prefix
    cookie_token = request.cookies.get("access_token")
    if cookie_token:
        return cookie_token.split(" ", 1)[1] if cookie_token.startswith("Bearer ") else cookie_token

    # 2. Authorization header
    if credentials:
        return credentials.credentials
    return None


def _resolve_user(token: str, uow_factory: SQLiteUnitOfWorkFactory) -> User:
    payload = decode_access_token(token)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = payload.get("sub")
    if user_id is None or not isinstance(user_id, str):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )

    try:
        uid = UUID(user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        ) from None

    with uow_factory(read_only=True) as uow:
        user = uow.users.get_by_id(uid)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return user


def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    uow_factory: SQLiteUnitOfWorkFactory = Depends(get_uow_factory),
) -> User:
    token = _extract_token(request, credentials)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return _resolve_user(token, uow_factory)


def get_optional_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    uow_factory: SQLiteUnitOfWorkFactory = Depends(get_uow_factory),
) -> User | None:
    """Like get_current_user, but anonymous callers get None instead of 401."""
    token = _extract_token(request, credentials)
    if not token:
        return None
    return _resolve_user(token, uow_factory)
