"""
Tags component.

TagResolver turns free-text names into Tag rows inside a caller's unit of
work. TagService is the admin-governed tag dictionary.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from uuid import UUID

from src.components.slugs import commit_with_retry, generate_unique_slug
from src.components.tags.models import TagDetail, TagWithCount
from src.components.tags.ports import ClockPort, PolicyPort, UnitOfWork, UnitOfWorkFactory
from src.core.ports.db import TAG_NAME, UniqueViolationError
from src.domain.entities import Tag, User
from src.domain.errors import ConflictError, NotFoundError, ValidationFailure
from src.domain.sanitize import sanitize_text
from src.rules.models import ContentRules

logger = logging.getLogger(__name__)


class TagResolver:
    """Get-or-create by case-insensitive name, tolerant of concurrent creators."""

    def __init__(self, limits: ContentRules, clock: ClockPort):
        self.limits = limits
        self.clock = clock

    def clean_name(self, name: str) -> str:
        cleaned = sanitize_text(name)
        if not cleaned:
            raise ValidationFailure("Tag name must not be empty", field="name")
        if len(cleaned) > self.limits.tag_name_max:
            raise ValidationFailure(
                f"Tag name must be at most {self.limits.tag_name_max} characters", field="name"
            )
        return cleaned

    def get_or_create(self, uow: UnitOfWork, name: str) -> Tag:
        name = self.clean_name(name)

        existing = uow.tags.get_by_name(name)
        if existing:
            return existing

        now = self.clock.now_utc()
        slug = generate_unique_slug(name, uow.tags.slug_owner, field="name")
        tag = Tag(name=name, slug=slug, created_at=now, updated_at=now)

        try:
            with uow.savepoint():
                uow.tags.insert(tag)
        except UniqueViolationError as e:
            if e.constraint != TAG_NAME:
                raise
            winner = uow.tags.get_by_name(name)
            if winner is None:
                raise
            logger.info("Tag '%s' was created concurrently; using %s", name, winner.id)
            return winner

        return tag

    def resolve_all(self, uow: UnitOfWork, names: Iterable[str]) -> list[Tag]:
        """Resolve names in order, dropping tags already resolved (e.g. "JS" and "js")."""
        tags: list[Tag] = []
        seen: set[UUID] = set()
        for name in names:
            tag = self.get_or_create(uow, name)
            if tag.id not in seen:
                seen.add(tag.id)
                tags.append(tag)
        return tags


class TagService:
    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        resolver: TagResolver,
        policy: PolicyPort,
        clock: ClockPort,
        max_attempts: int = 3,
    ):
        self.uow_factory = uow_factory
        self.resolver = resolver
        self.policy = policy
        self.clock = clock
        self.max_attempts = max_attempts

    def list_tags(self) -> list[TagWithCount]:
        with self.uow_factory(read_only=True) as uow:
            rows = uow.tags.list_with_counts()
        return [TagWithCount(tag=tag, posts_count=count) for tag, count in rows]

    def get_tag(self, slug: str) -> TagDetail:
        with self.uow_factory(read_only=True) as uow:
            tag = uow.tags.get_by_slug(slug)
            if not tag:
                raise NotFoundError("Tag not found")
            posts = uow.tags.list_published_posts(tag.id)
            count = uow.tags.count_posts(tag.id)
        return TagDetail(tag=tag, posts=posts, posts_count=count)

    def create_tag(self, actor: User, name: str) -> Tag:
        self.policy.require(actor, "tags:manage")
        name = self.resolver.clean_name(name)

        def work(uow: UnitOfWork) -> Tag:
            if uow.tags.get_by_name(name):
                raise ConflictError("Tag already exists")
            now = self.clock.now_utc()
            slug = generate_unique_slug(name, uow.tags.slug_owner, field="name")
            return uow.tags.insert(Tag(name=name, slug=slug, created_at=now, updated_at=now))

        tag = commit_with_retry(self.uow_factory, work, self.max_attempts)
        logger.info("Tag created: %s (%s)", tag.slug, tag.id)
        return tag

    def rename_tag(self, actor: User, tag_id: UUID, name: str) -> Tag:
        self.policy.require(actor, "tags:manage")
        name = self.resolver.clean_name(name)

        def work(uow: UnitOfWork) -> Tag:
            tag = uow.tags.get_by_id(tag_id)
            if not tag:
                raise NotFoundError("Tag not found")

            clash = uow.tags.get_by_name(name)
            if clash and clash.id != tag.id:
                raise ConflictError("Tag name already exists")

            slug = generate_unique_slug(name, uow.tags.slug_owner, exclude_id=tag.id, field="name")
            updated = tag.model_copy(
                update={"name": name, "slug": slug, "updated_at": self.clock.now_utc()}
            )
            return uow.tags.update(updated)

        return commit_with_retry(self.uow_factory, work, self.max_attempts)

    def delete_tag(self, actor: User, tag_id: UUID) -> None:
        self.policy.require(actor, "tags:manage")

        with self.uow_factory() as uow:
            tag = uow.tags.get_by_id(tag_id)
            if not tag:
                raise NotFoundError("Tag not found")
            if uow.tags.count_posts(tag_id) > 0:
                raise ConflictError("Cannot delete tag with associated posts")
            uow.tags.delete(tag_id)

        logger.info("Tag deleted: %s", tag_id)
