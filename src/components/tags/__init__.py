"""Tags component - tag resolution and the admin tag dictionary."""

from src.components.tags.component import TagResolver, TagService
from src.components.tags.models import TagDetail, TagWithCount
from src.components.tags.ports import ClockPort, PolicyPort

__all__ = [
    # Components
    "TagResolver",
    "TagService",
    # Models
    "TagDetail",
    "TagWithCount",
    # Ports
    "ClockPort",
    "PolicyPort",
]
