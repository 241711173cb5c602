# Inkwell - Ports (Protocol Interfaces)
# Abstract interfaces for adapters; no implementations here

from src.core.ports.db import (
    PENDING_REQUEST,
    POST_SLUG,
    TAG_NAME,
    TAG_SLUG,
    CommentRepoPort,
    PostListQuery,
    PostRepoPort,
    PublishRequestRepoPort,
    TagRepoPort,
    UniqueViolationError,
    UnitOfWork,
    UnitOfWorkFactory,
    UserListQuery,
    UserRepoPort,
)

__all__ = [
    # Constraint names
    "POST_SLUG",
    "TAG_NAME",
    "TAG_SLUG",
    "PENDING_REQUEST",
    # Errors
    "UniqueViolationError",
    # Queries
    "PostListQuery",
    "UserListQuery",
    # Repositories
    "UserRepoPort",
    "PostRepoPort",
    "TagRepoPort",
    "PublishRequestRepoPort",
    "CommentRepoPort",
    # Unit of work
    "UnitOfWork",
    "UnitOfWorkFactory",
]
