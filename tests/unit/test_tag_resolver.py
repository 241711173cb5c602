from contextlib import nullcontext
from datetime import UTC, datetime
from unittest.mock import Mock
from uuid import uuid4

import pytest

from src.components.tags import TagResolver
from src.core.ports.db import TAG_NAME, TAG_SLUG, UniqueViolationError
from src.domain.entities import Tag
from src.domain.errors import ValidationFailure
from src.rules.models import ContentRules


@pytest.fixture
def mock_clock():
    c = Mock()
    c.now_utc.return_value = datetime(2025, 1, 1, 12, 0, 0, tzinfo=UTC)
    return c


@pytest.fixture
def uow():
    u = Mock()
    u.savepoint.side_effect = lambda: nullcontext()
    u.tags.get_by_name.return_value = None
    u.tags.slug_owner.return_value = None
    return u


@pytest.fixture
def resolver(mock_clock):
    return TagResolver(ContentRules(tag_name_max=20), mock_clock)


def test_existing_tag_is_returned(resolver, uow):
    existing = Tag(name="Python", slug="python")
    uow.tags.get_by_name.return_value = existing

    assert resolver.get_or_create(uow, "python") is existing
    uow.tags.insert.assert_not_called()


def test_new_tag_is_inserted(resolver, uow, mock_clock):
    tag = resolver.get_or_create(uow, "  Machine Learning ")

    assert tag.name == "Machine Learning"
    assert tag.slug == "machine-learning"
    assert tag.created_at == mock_clock.now_utc.return_value
    uow.tags.insert.assert_called_once_with(tag)
    uow.savepoint.assert_called_once()


def test_new_tag_slug_avoids_collisions(resolver, uow):
    uow.tags.slug_owner.side_effect = lambda s: uuid4() if s == "c" else None

    tag = resolver.get_or_create(uow, "C")

    assert tag.slug == "c-1"


def test_name_race_returns_winner(resolver, uow):
    winner = Tag(name="JavaScript", slug="javascript")
    uow.tags.get_by_name.side_effect = [None, winner]
    uow.tags.insert.side_effect = UniqueViolationError(TAG_NAME)

    assert resolver.get_or_create(uow, "javascript") is winner


def test_slug_race_propagates(resolver, uow):
    uow.tags.insert.side_effect = UniqueViolationError(TAG_SLUG)

    with pytest.raises(UniqueViolationError) as exc:
        resolver.get_or_create(uow, "Go")
    assert exc.value.constraint == TAG_SLUG


def test_name_race_without_winner_propagates(resolver, uow):
    uow.tags.insert.side_effect = UniqueViolationError(TAG_NAME)

    with pytest.raises(UniqueViolationError):
        resolver.get_or_create(uow, "Go")


def test_resolve_all_deduplicates_in_order(resolver, uow):
    js = Tag(name="JS", slug="js")
    py = Tag(name="Python", slug="python")
    lookup = {"js": js, "python": py}
    uow.tags.get_by_name.side_effect = lambda name: lookup.get(name.lower())

    tags = resolver.resolve_all(uow, ["JS", "Python", "js"])

    assert tags == [js, py]


@pytest.mark.parametrize("name", ["", "   ", "<b></b>"])
def test_empty_name_rejected(resolver, uow, name):
    with pytest.raises(ValidationFailure):
        resolver.get_or_create(uow, name)


def test_long_name_rejected(resolver, uow):
    with pytest.raises(ValidationFailure):
        resolver.get_or_create(uow, "x" * 21)
