"""Comments component - reader comments on published posts."""

from __future__ import annotations

import logging
from uuid import UUID

from src.components.comments.ports import ClockPort, PolicyPort
from src.core.ports.db import UnitOfWorkFactory
from src.domain.entities import Comment, User
from src.domain.errors import InvalidStateError, NotFoundError, ValidationFailure
from src.domain.policy import authorize
from src.domain.sanitize import sanitize_text
from src.rules.models import ContentRules

logger = logging.getLogger(__name__)


class CommentService:
    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        policy: PolicyPort,
        clock: ClockPort,
        limits: ContentRules,
    ):
        self.uow_factory = uow_factory
        self.policy = policy
        self.clock = clock
        self.limits = limits

    def _clean_content(self, content: str) -> str:
        cleaned = sanitize_text(content)
        if not cleaned:
            raise ValidationFailure("Comment must not be empty", field="content")
        if len(cleaned) > self.limits.comment_max:
            raise ValidationFailure(
                f"Comment must be at most {self.limits.comment_max} characters", field="content"
            )
        return cleaned

    def list_for_post(self, post_id: UUID, actor: User | None = None) -> list[Comment]:
        with self.uow_factory(read_only=True) as uow:
            post = uow.posts.get_by_id(post_id)
            if not post or (post.status != "PUBLISHED" and actor is None):
                raise NotFoundError("Post not found")
            return uow.comments.list_for_post(post_id)

    def create_comment(self, actor: User, post_id: UUID, content: str) -> Comment:
        self.policy.require(actor, "comments:create")
        content = self._clean_content(content)

        with self.uow_factory() as uow:
            post = uow.posts.get_by_id(post_id)
            if not post:
                raise NotFoundError("Post not found")
            if post.status != "PUBLISHED":
                raise InvalidStateError("Cannot comment on unpublished posts")

            now = self.clock.now_utc()
            comment = Comment(
                post_id=post_id,
                author_id=actor.id,
                content=content,
                created_at=now,
                updated_at=now,
            )
            uow.comments.insert(comment)

        logger.info("Comment created: %s on post %s by %s", comment.id, post_id, actor.id)
        return comment

    def update_comment(self, actor: User, comment_id: UUID, content: str) -> Comment:
        content = self._clean_content(content)

        with self.uow_factory() as uow:
            comment = uow.comments.get_by_id(comment_id)
            if not comment:
                raise NotFoundError("Comment not found")
            authorize(actor, comment)

            updated = comment.model_copy(
                update={"content": content, "updated_at": self.clock.now_utc()}
            )
            uow.comments.update(updated)

        return updated

    def delete_comment(self, actor: User, comment_id: UUID) -> None:
        with self.uow_factory() as uow:
            comment = uow.comments.get_by_id(comment_id)
            if not comment:
                raise NotFoundError("Comment not found")
            authorize(actor, comment)
            uow.comments.delete(comment_id)

        logger.info("Comment deleted: %s by %s", comment_id, actor.id)

    def list_my_comments(self, actor: User) -> list[Comment]:
        with self.uow_factory(read_only=True) as uow:
            return uow.comments.list_by_author(actor.id)
