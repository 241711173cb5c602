"""Comments component - reader comments on published posts."""

from src.components.comments.component import CommentService
from src.components.comments.ports import ClockPort, PolicyPort

__all__ = [
    # Component
    "CommentService",
    # Ports
    "PolicyPort",
    "ClockPort",
]
