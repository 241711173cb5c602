"""
Users component.

Admin-only account management. Identities are issued elsewhere; the only
attribute an admin changes here is the role.
"""

from __future__ import annotations

import logging
from uuid import UUID

from src.components.users.models import ListUsersInput, UserPage, UserSummary
from src.components.users.ports import ClockPort, PolicyPort, UnitOfWorkFactory
from src.core.ports.db import UserListQuery
from src.domain.entities import Role, User
from src.domain.errors import InvalidStateError, NotFoundError, ValidationFailure

logger = logging.getLogger(__name__)

MAX_LIMIT = 100


class UserService:
    def __init__(self, uow_factory: UnitOfWorkFactory, policy: PolicyPort, clock: ClockPort):
        self.uow_factory = uow_factory
        self.policy = policy
        self.clock = clock

    def list_users(self, actor: User, query: ListUsersInput) -> UserPage:
        self.policy.require(actor, "users:manage")
        if query.limit < 1 or query.limit > MAX_LIMIT:
            raise ValidationFailure(f"limit must be between 1 and {MAX_LIMIT}", field="limit")
        if query.page < 1:
            raise ValidationFailure("page must be at least 1", field="page")

        search = query.search.strip() if query.search else None
        storage_query = UserListQuery(
            role=query.role,
            search=search or None,
            limit=query.limit,
            offset=(query.page - 1) * query.limit,
        )
        with self.uow_factory(read_only=True) as uow:
            rows, total = uow.users.list_with_counts(storage_query)

        users = [UserSummary(user=u, posts_count=p, comments_count=c) for u, p, c in rows]
        return UserPage(users=users, total=total, page=query.page, limit=query.limit)

    def get_user(self, actor: User, user_id: UUID) -> UserSummary:
        self.policy.require(actor, "users:manage")
        with self.uow_factory(read_only=True) as uow:
            user = uow.users.get_by_id(user_id)
            if not user:
                raise NotFoundError("User not found")
            posts_count, comments_count = uow.users.count_content(user_id)
        return UserSummary(user=user, posts_count=posts_count, comments_count=comments_count)

    def set_role(self, actor: User, user_id: UUID, role: Role) -> UserSummary:
        """Change another user's role. Admins cannot change their own."""
        self.policy.require(actor, "users:manage")
        if user_id == actor.id:
            raise InvalidStateError("Cannot change your own role")

        with self.uow_factory() as uow:
            user = uow.users.get_by_id(user_id)
            if not user:
                raise NotFoundError("User not found")
            previous = user.role
            if user.role != role:
                user = uow.users.save(
                    user.model_copy(update={"role": role, "updated_at": self.clock.now_utc()})
                )
            posts_count, comments_count = uow.users.count_content(user_id)

        if previous != role:
            logger.info("Role changed: user=%s %s -> %s by %s", user_id, previous, role, actor.id)
        return UserSummary(user=user, posts_count=posts_count, comments_count=comments_count)
