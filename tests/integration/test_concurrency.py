"""
Races between concurrent writers. Every thread runs its own unit of work on
its own connection; the store constraints and write locks decide the outcome.
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from src.components.posts import CreatePostInput
from src.domain.errors import ConflictError, InvalidStateError

WORKERS = 8


def run_together(*calls):
    """Run callables on separate threads, released together. Returns (results, errors)."""
    barrier = threading.Barrier(len(calls))

    def wrapped(fn):
        barrier.wait()
        return fn()

    with ThreadPoolExecutor(max_workers=len(calls)) as pool:
        futures = [pool.submit(wrapped, fn) for fn in calls]
        outcomes = [(f.exception(), f) for f in futures]

    results = [f.result() for exc, f in outcomes if exc is None]
    errors = [exc for exc, _ in outcomes if exc is not None]
    return results, errors


def test_concurrent_posts_get_distinct_slugs(test_ctx, author):
    create = test_ctx.post_service.create_post

    results, errors = run_together(
        *[lambda: create(author, CreatePostInput(title="Same Title", content="x"))] * WORKERS
    )

    assert errors == []
    expected = {"same-title"} | {f"same-title-{i}" for i in range(1, WORKERS)}
    assert {p.slug for p in results} == expected


def test_concurrent_requests_leave_one_pending(test_ctx, author):
    post = test_ctx.post_service.create_post(author, CreatePostInput(title="Race", content="x"))
    request = test_ctx.publish_service.request_publish

    results, errors = run_together(
        lambda: request(author, post.id), lambda: request(author, post.id)
    )

    assert len(results) == 1
    assert len(errors) == 1
    assert isinstance(errors[0], ConflictError)

    with test_ctx.uow_factory(read_only=True) as uow:
        pending = uow.publish_requests.list(status="PENDING")
        assert [r.id for r in pending] == [results[0].id]
        assert uow.posts.get_by_id(post.id).status == "PENDING_APPROVAL"


def test_approve_and_reject_race(test_ctx, author, admin):
    post = test_ctx.post_service.create_post(author, CreatePostInput(title="Race", content="x"))
    req = test_ctx.publish_service.request_publish(author, post.id)
    publish = test_ctx.publish_service

    results, errors = run_together(
        lambda: publish.approve(admin, req.id),
        lambda: publish.reject(admin, req.id, "no"),
    )

    assert len(results) == 1
    assert len(errors) == 1
    assert isinstance(errors[0], InvalidStateError)

    winner = results[0]
    with test_ctx.uow_factory(read_only=True) as uow:
        stored_req = uow.publish_requests.get_by_id(req.id)
        stored_post = uow.posts.get_by_id(post.id)

    assert stored_req.status == winner.status
    expected_post_status = "PUBLISHED" if winner.status == "APPROVED" else "DRAFT"
    assert stored_post.status == expected_post_status


@pytest.mark.parametrize("names", [("JavaScript", "javascript"), ("Rust", "RUST")])
def test_case_variant_tags_resolve_to_one_row(test_ctx, author, names):
    create = test_ctx.post_service.create_post

    results, errors = run_together(
        *[
            (lambda n=n: create(author, CreatePostInput(title=f"On {n}", content="x", tags=[n])))
            for n in names
        ]
    )

    assert errors == []
    tag_ids = {p.tags[0].id for p in results}
    assert len(tag_ids) == 1

    with test_ctx.uow_factory(read_only=True) as uow:
        rows = [t for t, _ in uow.tags.list_with_counts() if t.name.lower() == names[0].lower()]
    assert len(rows) == 1
    assert rows[0].id in tag_ids
