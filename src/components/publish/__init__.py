"""Publish component - editorial request/approve/reject/cancel workflow."""

from src.components.publish.component import (
    ALREADY_PENDING,
    ONLY_DRAFTS,
    ONLY_PENDING_CANCEL,
    PublishService,
)
from src.components.publish.ports import ClockPort, PolicyPort

__all__ = [
    # Component
    "PublishService",
    # Messages
    "ALREADY_PENDING",
    "ONLY_DRAFTS",
    "ONLY_PENDING_CANCEL",
    # Ports
    "PolicyPort",
    "ClockPort",
]
