"""Posts component - create, update, delete and read posts."""

from src.components.posts.component import PostService
from src.components.posts.models import CreatePostInput, ListPostsInput, PostPage, UpdatePostInput
from src.components.posts.ports import ClockPort, PolicyPort, TagResolverPort

__all__ = [
    # Component
    "PostService",
    # Models
    "CreatePostInput",
    "UpdatePostInput",
    "ListPostsInput",
    "PostPage",
    # Ports
    "PolicyPort",
    "TagResolverPort",
    "ClockPort",
]
