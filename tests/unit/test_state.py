from datetime import UTC, datetime
from uuid import uuid4

import pytest

from src.domain.entities import Post, PublishRequest
from src.domain.errors import InvalidStateError
from src.domain.state import (
    InvalidTransitionError,
    resolve_request,
    transition_post,
)

NOW = datetime(2025, 1, 1, 12, 0, 0, tzinfo=UTC)


def make_post(status="DRAFT", **kwargs):
    return Post(title="T", slug="t", content="c", author_id=uuid4(), status=status, **kwargs)


def make_request(status="PENDING", message=None):
    return PublishRequest(post_id=uuid4(), author_id=uuid4(), status=status, message=message)


def test_request_moves_draft_to_pending():
    post = make_post()
    updated = transition_post(post, "request", NOW)

    assert updated.status == "PENDING_APPROVAL"
    assert updated.updated_at == NOW
    assert updated.published_at is None
    # Original untouched
    assert post.status == "DRAFT"


def test_approve_sets_published_at():
    updated = transition_post(make_post("PENDING_APPROVAL"), "approve", NOW)

    assert updated.status == "PUBLISHED"
    assert updated.published_at == NOW


def test_reject_does_not_touch_published_at():
    earlier = datetime(2024, 6, 1, tzinfo=UTC)
    post = make_post("PENDING_APPROVAL", published_at=earlier)

    updated = transition_post(post, "reject", NOW)

    assert updated.status == "DRAFT"
    assert updated.published_at == earlier


@pytest.mark.parametrize(
    "status,action",
    [
        ("PUBLISHED", "request"),
        ("PENDING_APPROVAL", "request"),
        ("DRAFT", "approve"),
        ("DRAFT", "reject"),
        ("ARCHIVED", "cancel"),
    ],
)
def test_invalid_post_transitions(status, action):
    with pytest.raises(InvalidTransitionError) as exc:
        transition_post(make_post(status), action, NOW)
    assert isinstance(exc.value, InvalidStateError)
    assert exc.value.current == status


def test_resolve_request_approve_keeps_message_when_none_given():
    resolved = resolve_request(make_request(message="please"), "approve", NOW)

    assert resolved.status == "APPROVED"
    assert resolved.message == "please"
    assert resolved.updated_at == NOW


def test_resolve_request_replaces_message_when_given():
    resolved = resolve_request(make_request(message="please"), "reject", NOW, message="needs work")

    assert resolved.status == "REJECTED"
    assert resolved.message == "needs work"


@pytest.mark.parametrize("status", ["APPROVED", "REJECTED"])
def test_resolve_processed_request(status):
    with pytest.raises(InvalidTransitionError, match="already been processed"):
        resolve_request(make_request(status), "approve", NOW)


def test_resolve_request_rejects_non_resolving_action():
    with pytest.raises(ValueError):
        resolve_request(make_request(), "cancel", NOW)
