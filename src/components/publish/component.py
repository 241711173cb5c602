"""
Publish component - the editorial approval workflow.

Every transition reads and writes the post and its publish request inside one
unit of work, so the status check and the mutation see the same snapshot.
Write units hold the database write lock from their first statement; two
concurrent decisions on one request are therefore serialized and the second
one observes the first one's result.
"""

from __future__ import annotations

import logging
from uuid import UUID

from src.components.publish.ports import ClockPort, PolicyPort
from src.core.ports.db import PENDING_REQUEST, UniqueViolationError, UnitOfWorkFactory
from src.domain.entities import AuthorBrief, PostBrief, PublishRequest, PublishRequestStatus, User
from src.domain.errors import ConflictError, NotFoundError, ValidationFailure
from src.domain.policy import authorize
from src.domain.sanitize import sanitize_text
from src.domain.state import InvalidTransitionError, resolve_request, transition_post
from src.rules.models import ContentRules

logger = logging.getLogger(__name__)

ALREADY_PENDING = "A publish request is already pending for this post"
ONLY_DRAFTS = "Only draft posts can request publishing"
ONLY_PENDING_CANCEL = "Only pending requests can be cancelled"


class PublishService:
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

    def _clean_message(self, message: str | None) -> str | None:
        if message is None:
            return None
        cleaned = sanitize_text(message)
        if len(cleaned) > self.limits.message_max:
            raise ValidationFailure(
                f"Message must be at most {self.limits.message_max} characters", field="message"
            )
        return cleaned or None

    # --- Transitions ---

    def request_publish(
        self, actor: User, post_id: UUID, message: str | None = None
    ) -> PublishRequest:
        """DRAFT post -> PENDING_APPROVAL with a new PENDING request."""
        message = self._clean_message(message)

        try:
            with self.uow_factory() as uow:
                post = uow.posts.get_by_id(post_id)
                if not post:
                    raise NotFoundError("Post not found")

                self.policy.require(actor, "publish:request")
                authorize(actor, post)

                # Pending check first: the loser of two concurrent requests sees a
                # Conflict rather than a status error.
                if uow.publish_requests.get_pending_for_post(post_id):
                    raise ConflictError(ALREADY_PENDING)
                if post.status != "DRAFT":
                    raise InvalidTransitionError("post", post.status, "request", reason=ONLY_DRAFTS)

                now = self.clock.now_utc()
                request = PublishRequest(
                    post_id=post.id,
                    author_id=actor.id,
                    message=message,
                    created_at=now,
                    updated_at=now,
                )
                uow.publish_requests.insert(request)
                moved = transition_post(post, "request", now)
                uow.posts.update(moved)
                request = request.model_copy(
                    update={
                        "post": PostBrief.model_validate(moved),
                        "author": AuthorBrief.model_validate(actor),
                    }
                )
        except UniqueViolationError as e:
            if e.constraint != PENDING_REQUEST:
                raise
            raise ConflictError(ALREADY_PENDING) from e

        logger.info("Publish requested: request=%s post=%s by %s", request.id, post_id, actor.id)
        return request

    def approve(self, actor: User, request_id: UUID, message: str | None = None) -> PublishRequest:
        """PENDING request -> APPROVED; its post -> PUBLISHED with published_at set."""
        self.policy.require(actor, "publish:review")
        message = self._clean_message(message)
        return self._resolve(actor, request_id, "APPROVED", message)

    def reject(self, actor: User, request_id: UUID, message: str) -> PublishRequest:
        """PENDING request -> REJECTED with a reason; its post -> DRAFT."""
        self.policy.require(actor, "publish:review")
        cleaned = self._clean_message(message)
        if not cleaned:
            raise ValidationFailure("A message is required when rejecting", field="message")
        return self._resolve(actor, request_id, "REJECTED", cleaned)

    def _resolve(
        self,
        actor: User,
        request_id: UUID,
        outcome: PublishRequestStatus,
        message: str | None,
    ) -> PublishRequest:
        action = "approve" if outcome == "APPROVED" else "reject"

        with self.uow_factory() as uow:
            request = uow.publish_requests.get_by_id(request_id)
            if not request:
                raise NotFoundError("Publish request not found")
            post = uow.posts.get_by_id(request.post_id)
            if not post:
                raise NotFoundError("Post not found")

            now = self.clock.now_utc()
            resolved = resolve_request(request, action, now, message)
            uow.publish_requests.update(resolved)
            moved = transition_post(post, action, now)
            uow.posts.update(moved)
            resolved = resolved.model_copy(update={"post": PostBrief.model_validate(moved)})

        logger.info(
            "Publish request %s: request=%s post=%s by %s",
            outcome.lower(),
            request_id,
            resolved.post_id,
            actor.id,
        )
        return resolved

    def cancel(self, actor: User, request_id: UUID) -> None:
        """Delete a PENDING request and return its post to DRAFT."""
        with self.uow_factory() as uow:
            request = uow.publish_requests.get_by_id(request_id)
            if not request:
                raise NotFoundError("Publish request not found")
            authorize(actor, request)

            if request.status != "PENDING":
                raise InvalidTransitionError(
                    "publish request", request.status, "cancel", reason=ONLY_PENDING_CANCEL
                )

            post = uow.posts.get_by_id(request.post_id)
            if post:
                uow.posts.update(transition_post(post, "cancel", self.clock.now_utc()))
            uow.publish_requests.delete(request_id)

        logger.info("Publish request cancelled: request=%s by %s", request_id, actor.id)

    # --- Queries ---

    def list_requests(
        self,
        actor: User,
        status: PublishRequestStatus | None = None,
        author_id: UUID | None = None,
    ) -> list[PublishRequest]:
        self.policy.require(actor, "publish:review")
        with self.uow_factory(read_only=True) as uow:
            return uow.publish_requests.list(status=status, author_id=author_id)

    def list_my_requests(self, actor: User) -> list[PublishRequest]:
        with self.uow_factory(read_only=True) as uow:
            return uow.publish_requests.list(author_id=actor.id)
