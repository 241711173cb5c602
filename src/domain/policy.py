from collections.abc import Collection
from typing import Protocol
from uuid import UUID

from src.domain.entities import Role, User
from src.domain.errors import ForbiddenError
from src.rules.models import RbacRules


class OwnedResource(Protocol):
    author_id: UUID


class PolicyEngine:
    def __init__(self, rbac: RbacRules):
        self.rbac = rbac

    def check_permission(self, user: User | None, action: str) -> bool:
        """
        Check if the user's role (or the public) is allowed to perform the action.

        Order of precedence:
        1. Public Permissions (Global)
        2. Role-Based Access Control (RBAC)
        """
        if action in self.rbac.public_permissions:
            return True

        if not user:
            return False

        allowed_actions = self.rbac.roles.get(user.role, [])
        if "*" in allowed_actions:
            return True
        if action in allowed_actions:
            return True

        # Scoped wildcards (e.g. "posts:*" matches "posts:create")
        if ":" in action:
            scope = action.split(":")[0]
            if f"{scope}:*" in allowed_actions:
                return True

        return False

    def require(self, user: User | None, action: str) -> None:
        """Raise ForbiddenError unless check_permission passes."""
        if not self.check_permission(user, action):
            role = user.role if user else "anonymous"
            raise ForbiddenError(f"Role '{role}' is not allowed to perform '{action}'")


def is_owner(actor: User, resource: OwnedResource) -> bool:
    return str(actor.id) == str(resource.author_id)


def authorize(
    actor: User,
    resource: OwnedResource,
    allowed_roles: Collection[Role] = ("ADMIN",),
) -> None:
    """
    Ownership-or-role guard.

    Passes when the actor authored the resource or holds one of allowed_roles;
    raises ForbiddenError otherwise.
    """
    if actor.role in allowed_roles:
        return
    if is_owner(actor, resource):
        return
    raise ForbiddenError("Forbidden")
