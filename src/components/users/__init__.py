"""Users component - admin management of accounts and roles."""

from src.components.users.component import UserService
from src.components.users.models import ListUsersInput, UserPage, UserSummary
from src.components.users.ports import ClockPort, PolicyPort

__all__ = [
    # Components
    "UserService",
    # Models
    "ListUsersInput",
    "UserPage",
    "UserSummary",
    # Ports
    "ClockPort",
    "PolicyPort",
]
