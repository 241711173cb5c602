"""Tags component models - frozen dataclass outputs."""

from dataclasses import dataclass

from src.domain.entities import Post, Tag


@dataclass(frozen=True)
class TagWithCount:
    """A tag and the number of posts referencing it."""

    tag: Tag
    posts_count: int


@dataclass(frozen=True)
class TagDetail:
    """A tag with its published posts."""

    tag: Tag
    posts: list[Post]
    posts_count: int
