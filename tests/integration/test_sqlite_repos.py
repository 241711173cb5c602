from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from src.core.ports.db import (
    PENDING_REQUEST,
    POST_SLUG,
    TAG_NAME,
    PostListQuery,
    UniqueViolationError,
    UserListQuery,
)
from src.domain.entities import Comment, Post, PublishRequest, Tag, User


def make_post(author_id, slug="my-post", **kwargs):
    fields = {"title": slug.replace("-", " "), "slug": slug, "content": "Body", "author_id": author_id}
    fields.update(kwargs)
    return Post(**fields)


# --- Users ---


def test_user_roundtrip(uow_factory, make_user):
    user = make_user("ADMIN", email="boss@example.com")

    with uow_factory(read_only=True) as uow:
        by_id = uow.users.get_by_id(user.id)
        by_email = uow.users.get_by_email("boss@example.com")

    assert by_id == user
    assert by_email.id == user.id
    assert by_id.role == "ADMIN"


def test_user_listing_with_counts(uow_factory):
    base = datetime(2025, 1, 1, tzinfo=UTC)
    ada = User(email="ada@example.com", name="Ada", role="AUTHOR", created_at=base)
    bob = User(email="bob@example.com", name="Bob_1", created_at=base + timedelta(days=1))
    post = make_post(ada.id)
    with uow_factory() as uow:
        uow.users.save(ada)
        uow.users.save(bob)
        uow.posts.insert(post)
        uow.comments.insert(Comment(post_id=post.id, author_id=bob.id, content="Hi"))

    with uow_factory(read_only=True) as uow:
        everyone, total = uow.users.list_with_counts(UserListQuery())
        authors, _ = uow.users.list_with_counts(UserListQuery(role="AUTHOR"))
        literal, _ = uow.users.list_with_counts(UserListQuery(search="b_1"))
        wildcard, _ = uow.users.list_with_counts(UserListQuery(search="a_a"))
        second_page, _ = uow.users.list_with_counts(UserListQuery(limit=1, offset=1))
        counts = uow.users.count_content(ada.id)

    assert total == 2
    assert [(u.email, p, c) for u, p, c in everyone] == [
        ("bob@example.com", 0, 1),
        ("ada@example.com", 1, 0),
    ]
    assert [u.id for u, _, _ in authors] == [ada.id]
    assert [u.id for u, _, _ in literal] == [bob.id]
    assert wildcard == []
    assert [u.id for u, _, _ in second_page] == [ada.id]
    assert counts == (1, 0)


# --- Unit of work ---


def test_rollback_on_exception(uow_factory, author):
    post = make_post(author.id)

    with pytest.raises(RuntimeError):
        with uow_factory() as uow:
            uow.posts.insert(post)
            raise RuntimeError("boom")

    with uow_factory(read_only=True) as uow:
        assert uow.posts.get_by_id(post.id) is None


def test_savepoint_rolls_back_nested_writes_only(uow_factory, author):
    kept = make_post(author.id, slug="kept")
    dropped = make_post(author.id, slug="dropped")

    with uow_factory() as uow:
        uow.posts.insert(kept)
        with pytest.raises(ValueError):
            with uow.savepoint():
                uow.posts.insert(dropped)
                raise ValueError("undo")

    with uow_factory(read_only=True) as uow:
        assert uow.posts.get_by_id(kept.id) is not None
        assert uow.posts.get_by_id(dropped.id) is None


# --- Unique violations ---


def test_duplicate_post_slug(uow_factory, author):
    with uow_factory() as uow:
        uow.posts.insert(make_post(author.id))

    with pytest.raises(UniqueViolationError) as exc:
        with uow_factory() as uow:
            uow.posts.insert(make_post(author.id))
    assert exc.value.constraint == POST_SLUG


def test_tag_names_unique_case_insensitively(uow_factory):
    with uow_factory() as uow:
        uow.tags.insert(Tag(name="JavaScript", slug="javascript"))

    with pytest.raises(UniqueViolationError) as exc:
        with uow_factory() as uow:
            uow.tags.insert(Tag(name="javascript", slug="javascript-1"))
    assert exc.value.constraint == TAG_NAME

    with uow_factory(read_only=True) as uow:
        assert uow.tags.get_by_name("JAVASCRIPT").slug == "javascript"


@pytest.mark.parametrize(
    "first, second", [("Ärger", "ärger"), ("Straße", "STRASSE"), ("Σίσυφος", "ΣΊΣΥΦΟΣ")]
)
def test_tag_names_unique_beyond_ascii(uow_factory, first, second):
    with uow_factory() as uow:
        uow.tags.insert(Tag(name=first, slug="first"))

    with pytest.raises(UniqueViolationError) as exc:
        with uow_factory() as uow:
            uow.tags.insert(Tag(name=second, slug="second"))
    assert exc.value.constraint == TAG_NAME

    with uow_factory(read_only=True) as uow:
        assert uow.tags.get_by_name(second).name == first


def test_one_pending_request_per_post(uow_factory, author):
    post = make_post(author.id)
    with uow_factory() as uow:
        uow.posts.insert(post)
        uow.publish_requests.insert(PublishRequest(post_id=post.id, author_id=author.id))

    with pytest.raises(UniqueViolationError) as exc:
        with uow_factory() as uow:
            uow.publish_requests.insert(PublishRequest(post_id=post.id, author_id=author.id))
    assert exc.value.constraint == PENDING_REQUEST


def test_resolved_requests_do_not_block_new_ones(uow_factory, author):
    post = make_post(author.id)
    with uow_factory() as uow:
        uow.posts.insert(post)
        uow.publish_requests.insert(
            PublishRequest(post_id=post.id, author_id=author.id, status="REJECTED")
        )
        uow.publish_requests.insert(PublishRequest(post_id=post.id, author_id=author.id))

    with uow_factory(read_only=True) as uow:
        assert len(uow.publish_requests.list()) == 2
        assert uow.publish_requests.get_pending_for_post(post.id) is not None


def test_requests_carry_post_and_author_summaries(uow_factory, author):
    post = make_post(author.id, excerpt="Short", status="PENDING_APPROVAL")
    request = PublishRequest(post_id=post.id, author_id=author.id)
    with uow_factory() as uow:
        uow.posts.insert(post)
        uow.publish_requests.insert(request)

    with uow_factory(read_only=True) as uow:
        loaded = [
            uow.publish_requests.get_by_id(request.id),
            uow.publish_requests.get_pending_for_post(post.id),
            uow.publish_requests.list(author_id=author.id)[0],
        ]

    for found in loaded:
        assert found.post.title == "my post"
        assert found.post.excerpt == "Short"
        assert found.post.status == "PENDING_APPROVAL"
        assert found.author.id == author.id
        assert found.author.email == author.email


# --- Posts and tags ---


def test_replace_tags_keeps_order(uow_factory, author):
    post = make_post(author.id)
    a, b, c = (Tag(name=n, slug=n.lower()) for n in ("A", "B", "C"))

    with uow_factory() as uow:
        uow.posts.insert(post)
        for t in (a, b, c):
            uow.tags.insert(t)
        uow.posts.replace_tags(post.id, [c.id, a.id])

    with uow_factory() as uow:
        assert [t.name for t in uow.posts.get_by_id(post.id).tags] == ["C", "A"]
        uow.posts.replace_tags(post.id, [b.id])

    with uow_factory(read_only=True) as uow:
        assert [t.name for t in uow.posts.get_by_id(post.id).tags] == ["B"]
        assert uow.tags.count_posts(a.id) == 0
        assert uow.tags.count_posts(b.id) == 1


def test_delete_post_cascades(uow_factory, author):
    post = make_post(author.id, status="PUBLISHED")
    tag = Tag(name="T", slug="t")

    with uow_factory() as uow:
        uow.posts.insert(post)
        uow.tags.insert(tag)
        uow.posts.replace_tags(post.id, [tag.id])
        uow.publish_requests.insert(PublishRequest(post_id=post.id, author_id=author.id))
        uow.comments.insert(Comment(post_id=post.id, author_id=author.id, content="hi"))

    with uow_factory() as uow:
        uow.posts.delete(post.id)

    with uow_factory(read_only=True) as uow:
        assert uow.posts.get_by_id(post.id) is None
        assert uow.tags.get_by_id(tag.id) is not None
        assert uow.tags.count_posts(tag.id) == 0
        assert uow.publish_requests.list() == []
        assert uow.comments.list_by_author(author.id) == []


def test_increment_view_count(uow_factory, author):
    post = make_post(author.id)
    with uow_factory() as uow:
        uow.posts.insert(post)

    with uow_factory() as uow:
        assert uow.posts.increment_view_count(post.id) == 1
        assert uow.posts.increment_view_count(post.id) == 2

    with uow_factory() as uow:
        # update() never overwrites the counter
        uow.posts.update(post.model_copy(update={"title": "Renamed"}))

    with uow_factory(read_only=True) as uow:
        stored = uow.posts.get_by_id(post.id)
    assert stored.view_count == 2
    assert stored.title == "Renamed"


def test_tag_listing_with_counts_and_published_posts(uow_factory, author):
    published = make_post(author.id, slug="pub", status="PUBLISHED", published_at=datetime.now(UTC))
    draft = make_post(author.id, slug="draft")
    tag = Tag(name="Python", slug="python")
    unused = Tag(name="Go", slug="go")

    with uow_factory() as uow:
        uow.posts.insert(published)
        uow.posts.insert(draft)
        uow.tags.insert(tag)
        uow.tags.insert(unused)
        uow.posts.replace_tags(published.id, [tag.id])
        uow.posts.replace_tags(draft.id, [tag.id])

    with uow_factory(read_only=True) as uow:
        counts = {t.name: n for t, n in uow.tags.list_with_counts()}
        posts = uow.tags.list_published_posts(tag.id)

    assert counts == {"Go": 0, "Python": 2}
    assert [p.slug for p in posts] == ["pub"]


# --- Post listing ---


@pytest.fixture
def listing(uow_factory, author, other_author):
    base = datetime(2025, 1, 1, tzinfo=UTC)
    python = Tag(name="Python", slug="python")
    posts = [
        make_post(author.id, slug="alpha", title="Alpha intro", status="PUBLISHED",
                  view_count=0, created_at=base, updated_at=base),
        make_post(author.id, slug="beta", title="Beta 100% done", status="DRAFT",
                  created_at=base + timedelta(days=1), updated_at=base),
        make_post(other_author.id, slug="gamma", title="Gamma", status="PUBLISHED",
                  is_featured=True, created_at=base + timedelta(days=2), updated_at=base),
        make_post(other_author.id, slug="delta", title="Delta", status="DRAFT",
                  created_at=base + timedelta(days=3), updated_at=base),
    ]
    with uow_factory() as uow:
        uow.tags.insert(python)
        for p in posts:
            uow.posts.insert(p)
        uow.posts.replace_tags(posts[0].id, [python.id])
    return posts


def list_slugs(uow_factory, **kwargs):
    with uow_factory(read_only=True) as uow:
        posts, total = uow.posts.list(PostListQuery(**kwargs))
    return [p.slug for p in posts], total


def test_list_newest_first(uow_factory, listing):
    assert list_slugs(uow_factory) == (["delta", "gamma", "beta", "alpha"], 4)


def test_list_by_status(uow_factory, listing):
    assert list_slugs(uow_factory, status="PUBLISHED") == (["gamma", "alpha"], 2)


def test_list_visible_to(uow_factory, listing, author):
    slugs, total = list_slugs(uow_factory, visible_to=author.id)
    assert slugs == ["gamma", "beta", "alpha"]
    assert total == 3


def test_list_filters(uow_factory, listing, other_author):
    assert list_slugs(uow_factory, author_id=other_author.id)[0] == ["delta", "gamma"]
    assert list_slugs(uow_factory, tag_slug="python")[0] == ["alpha"]
    assert list_slugs(uow_factory, is_featured=True)[0] == ["gamma"]


def test_list_search_is_case_insensitive_and_literal(uow_factory, listing):
    assert list_slugs(uow_factory, search="ALPHA")[0] == ["alpha"]
    assert list_slugs(uow_factory, search="100%")[0] == ["beta"]
    assert list_slugs(uow_factory, search="%")[0] == ["beta"]


def test_list_sort_and_paginate(uow_factory, listing):
    slugs, total = list_slugs(uow_factory, sort_by="title", sort_order="asc", limit=2, offset=1)
    assert slugs == ["beta", "delta"]
    assert total == 4
