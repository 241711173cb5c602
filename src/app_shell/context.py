from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from src.adapters.clock import SystemClock
from src.adapters.sqlite.uow import SQLiteUnitOfWorkFactory
from src.components.comments import CommentService
from src.components.posts import PostService
from src.components.publish import PublishService
from src.components.tags import TagResolver, TagService
from src.components.users import UserService
from src.core.ports.db import UnitOfWorkFactory
from src.domain.policy import PolicyEngine
from src.rules.models import Rules


@dataclass
class ServiceContext:
    post_service: PostService
    publish_service: PublishService
    tag_service: TagService
    comment_service: CommentService
    user_service: UserService
    uow_factory: UnitOfWorkFactory
    policy: PolicyEngine
    rules: Rules
    clock: Any = None  # For testing/injection

    @classmethod
    def create(
        cls,
        db_path: str,
        rules: Rules,
        db_timeout: float = 5.0,
        clock: Any = None,
    ) -> ServiceContext:
        # Adapters
        uow_factory = SQLiteUnitOfWorkFactory(db_path, timeout=db_timeout)
        clock = clock or SystemClock()
        policy = PolicyEngine(rules.rbac)

        # Components
        tag_resolver = TagResolver(rules.content, clock)
        post_service = PostService(uow_factory, tag_resolver, policy, clock, rules)
        publish_service = PublishService(uow_factory, policy, clock, rules.content)
        tag_service = TagService(
            uow_factory, tag_resolver, policy, clock, max_attempts=rules.slugs.max_attempts
        )
        comment_service = CommentService(uow_factory, policy, clock, rules.content)
        user_service = UserService(uow_factory, policy, clock)

        return cls(
            post_service=post_service,
            publish_service=publish_service,
            tag_service=tag_service,
            comment_service=comment_service,
            user_service=user_service,
            uow_factory=uow_factory,
            policy=policy,
            rules=rules,
            clock=clock,
        )
