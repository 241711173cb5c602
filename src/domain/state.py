"""
Editorial state machine.

Post.status and PublishRequest.status move together through four workflow
actions. Each action has a required current status for each entity and a
resulting status:

- request: post DRAFT -> PENDING_APPROVAL; a new request starts PENDING
- approve: post PENDING_APPROVAL -> PUBLISHED; request PENDING -> APPROVED
- reject:  post PENDING_APPROVAL -> DRAFT;     request PENDING -> REJECTED
- cancel:  post PENDING_APPROVAL -> DRAFT;     request PENDING -> (deleted)

ARCHIVED has no inbound action here.
"""

from datetime import datetime
from typing import Any, Literal

from src.domain.entities import Post, PostStatus, PublishRequest, PublishRequestStatus
from src.domain.errors import InvalidStateError

WorkflowAction = Literal["request", "approve", "reject", "cancel"]

POST_TRANSITIONS: dict[WorkflowAction, tuple[PostStatus, PostStatus]] = {
    "request": ("DRAFT", "PENDING_APPROVAL"),
    "approve": ("PENDING_APPROVAL", "PUBLISHED"),
    "reject": ("PENDING_APPROVAL", "DRAFT"),
    "cancel": ("PENDING_APPROVAL", "DRAFT"),
}

REQUEST_TRANSITIONS: dict[WorkflowAction, tuple[PublishRequestStatus, PublishRequestStatus]] = {
    "approve": ("PENDING", "APPROVED"),
    "reject": ("PENDING", "REJECTED"),
}


class InvalidTransitionError(InvalidStateError):
    """Raised when an entity is not in the status an action requires."""

    def __init__(self, entity: str, current: str, action: WorkflowAction, reason: str = "") -> None:
        self.entity = entity
        self.current = current
        self.action = action
        msg = reason or f"Cannot {action} a {entity} in status '{current}'"
        super().__init__(msg)


def transition_post(post: Post, action: WorkflowAction, now: datetime) -> Post:
    """
    Return a NEW Post with the status the action produces.
    Raises InvalidTransitionError if the post is not in the required status.
    """
    required, target = POST_TRANSITIONS[action]
    if post.status != required:
        raise InvalidTransitionError("post", post.status, action)

    updates: dict[str, Any] = {"status": target, "updated_at": now}

    # published_at is only ever set here; reject and cancel leave it alone.
    if target == "PUBLISHED":
        updates["published_at"] = now

    return post.model_copy(update=updates)


def resolve_request(
    request: PublishRequest,
    action: WorkflowAction,
    now: datetime,
    message: str | None = None,
) -> PublishRequest:
    """
    Return a NEW PublishRequest resolved by an admin decision.
    The message is replaced only when one is given.
    """
    if action not in REQUEST_TRANSITIONS:
        raise ValueError(f"'{action}' does not resolve a publish request")

    required, target = REQUEST_TRANSITIONS[action]
    if request.status != required:
        raise InvalidTransitionError(
            "publish request",
            request.status,
            action,
            reason="This request has already been processed",
        )

    updates: dict[str, Any] = {"status": target, "updated_at": now}
    if message is not None:
        updates["message"] = message

    return request.model_copy(update=updates)
