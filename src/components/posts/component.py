"""
Posts component - post lifecycle outside the editorial workflow.

Create, update and delete run in one unit of work each. Writes that consume a
slug or create tags go through the bounded retry driver, which re-runs the
whole body when a concurrent writer took the same identifier.
"""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from src.components.posts.models import CreatePostInput, ListPostsInput, PostPage, UpdatePostInput
from src.components.posts.ports import ClockPort, PolicyPort, TagResolverPort
from src.components.slugs import commit_with_retry, generate_unique_slug
from src.core.ports.db import PostListQuery, UnitOfWork, UnitOfWorkFactory
from src.domain.entities import Post, User
from src.domain.errors import NotFoundError, ValidationFailure
from src.domain.policy import authorize, is_owner
from src.domain.sanitize import sanitize_markdown, sanitize_text, sanitize_url
from src.rules.models import Rules

logger = logging.getLogger(__name__)


class PostService:
    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        tag_resolver: TagResolverPort,
        policy: PolicyPort,
        clock: ClockPort,
        rules: Rules,
    ):
        self.uow_factory = uow_factory
        self.tag_resolver = tag_resolver
        self.policy = policy
        self.clock = clock
        self.rules = rules

    # --- Input cleaning ---

    def _clean_title(self, title: str) -> str:
        cleaned = sanitize_text(title)
        if not cleaned:
            raise ValidationFailure("Title is required", field="title")
        if len(cleaned) > self.rules.content.title_max:
            raise ValidationFailure(
                f"Title must be at most {self.rules.content.title_max} characters", field="title"
            )
        return cleaned

    def _clean_content(self, content: str) -> str:
        cleaned = sanitize_markdown(content)
        if not cleaned.strip():
            raise ValidationFailure("Content is required", field="content")
        return cleaned

    def _clean_excerpt(self, excerpt: str) -> str:
        cleaned = sanitize_text(excerpt)
        if len(cleaned) > self.rules.content.excerpt_max:
            raise ValidationFailure(
                f"Excerpt must be at most {self.rules.content.excerpt_max} characters",
                field="excerpt",
            )
        return cleaned

    def _clean_cover_image(self, url: str) -> str:
        cleaned = sanitize_url(url, self.rules.security.allowed_url_schemes)
        if cleaned is None:
            raise ValidationFailure("Cover image must be an http(s) URL", field="cover_image")
        return cleaned

    def _check_tag_count(self, tags: list[str]) -> None:
        if len(tags) > self.rules.content.max_tags_per_post:
            raise ValidationFailure(
                f"At most {self.rules.content.max_tags_per_post} tags per post", field="tags"
            )

    # --- Commands ---

    def create_post(self, actor: User, data: CreatePostInput) -> Post:
        self.policy.require(actor, "posts:create")

        title = self._clean_title(data.title)
        content = self._clean_content(data.content)
        excerpt = self._clean_excerpt(data.excerpt) if data.excerpt else None
        cover_image = self._clean_cover_image(data.cover_image) if data.cover_image else None
        self._check_tag_count(data.tags)

        def work(uow: UnitOfWork) -> Post:
            tags = self.tag_resolver.resolve_all(uow, data.tags)
            slug = generate_unique_slug(title, uow.posts.slug_owner)
            now = self.clock.now_utc()
            post = Post(
                title=title,
                slug=slug,
                content=content,
                excerpt=excerpt,
                cover_image=cover_image,
                is_featured=data.is_featured,
                author_id=actor.id,
                tags=tags,
                created_at=now,
                updated_at=now,
            )
            uow.posts.insert(post)
            uow.posts.replace_tags(post.id, [t.id for t in tags])
            return post

        post = commit_with_retry(self.uow_factory, work, self.rules.slugs.max_attempts)
        logger.info("Post created: %s (%s) by %s", post.slug, post.id, actor.id)
        return post

    def update_post(self, actor: User, post_id: UUID, data: UpdatePostInput) -> Post:
        updates: dict[str, Any] = {}
        if data.title is not None:
            updates["title"] = self._clean_title(data.title)
        if data.content is not None:
            updates["content"] = self._clean_content(data.content)
        if data.excerpt is not None:
            updates["excerpt"] = self._clean_excerpt(data.excerpt)
        if data.cover_image is not None:
            updates["cover_image"] = self._clean_cover_image(data.cover_image)
        if data.is_featured is not None:
            updates["is_featured"] = data.is_featured
        if data.tags is not None:
            self._check_tag_count(data.tags)

        def work(uow: UnitOfWork) -> Post:
            post = uow.posts.get_by_id(post_id)
            if not post:
                raise NotFoundError("Post not found")
            authorize(actor, post)

            changes = dict(updates)
            title = changes.get("title")
            if title is not None and title != post.title:
                changes["slug"] = generate_unique_slug(
                    title, uow.posts.slug_owner, exclude_id=post.id
                )

            if data.tags is not None:
                tags = self.tag_resolver.resolve_all(uow, data.tags)
                uow.posts.replace_tags(post.id, [t.id for t in tags])
                changes["tags"] = tags

            changes["updated_at"] = self.clock.now_utc()
            updated = post.model_copy(update=changes)
            return uow.posts.update(updated)

        post = commit_with_retry(self.uow_factory, work, self.rules.slugs.max_attempts)
        logger.info("Post updated: %s (%s) by %s", post.slug, post.id, actor.id)
        return post

    def delete_post(self, actor: User, post_id: UUID) -> None:
        with self.uow_factory() as uow:
            post = uow.posts.get_by_id(post_id)
            if not post:
                raise NotFoundError("Post not found")
            authorize(actor, post)
            uow.posts.delete(post_id)

        logger.info("Post deleted: %s by %s", post_id, actor.id)

    # --- Queries ---

    def get_post_by_slug(self, slug: str, actor: User | None = None) -> Post:
        """
        Public read. Unpublished posts exist only for their author and admins;
        a published read counts one view.
        """
        with self.uow_factory() as uow:
            post = uow.posts.get_by_slug(slug)
            if not post:
                raise NotFoundError("Post not found")

            if post.status != "PUBLISHED":
                if actor is None or not (is_owner(actor, post) or actor.role == "ADMIN"):
                    raise NotFoundError("Post not found")
                return post

            views = uow.posts.increment_view_count(post.id)
        return post.model_copy(update={"view_count": views})

    def get_post_for_edit(self, actor: User, post_id: UUID) -> Post:
        with self.uow_factory(read_only=True) as uow:
            post = uow.posts.get_by_id(post_id)
        if not post:
            raise NotFoundError("Post not found")
        authorize(actor, post)
        return post

    def list_posts(self, actor: User | None, query: ListPostsInput) -> PostPage:
        pagination = self.rules.pagination
        limit = query.limit if query.limit is not None else pagination.default_limit
        if limit < 1 or limit > pagination.max_limit:
            raise ValidationFailure(
                f"limit must be between 1 and {pagination.max_limit}", field="limit"
            )
        if query.page < 1:
            raise ValidationFailure("page must be at least 1", field="page")

        status = query.status
        author_id = query.author_id
        visible_to: UUID | None = None

        if actor is None:
            status = "PUBLISHED"
        elif actor.role != "ADMIN":
            if author_id is not None and author_id != actor.id:
                status = "PUBLISHED"
            elif status is not None and status != "PUBLISHED":
                author_id = actor.id
            elif status is None:
                visible_to = actor.id

        storage_query = PostListQuery(
            status=status,
            author_id=author_id,
            visible_to=visible_to,
            tag_slug=query.tag_slug,
            is_featured=query.is_featured,
            search=query.search.strip() if query.search and query.search.strip() else None,
            sort_by=query.sort_by,
            sort_order=query.sort_order,
            limit=limit,
            offset=(query.page - 1) * limit,
        )

        with self.uow_factory(read_only=True) as uow:
            posts, total = uow.posts.list(storage_query)

        return PostPage(posts=posts, total=total, page=query.page, limit=limit)
