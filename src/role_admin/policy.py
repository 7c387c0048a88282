"""Role protection rules applied before offering an action to the operator.

The directory enforces authorization; these rules only decide which
actions the panel offers:

- the ``user`` role is never removable;
- the ``admin`` role cannot be removed from the acting administrator;
- administrators cannot be deleted from the panel.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .ports import User

USER_ROLE = "user"
ADMIN_ROLE = "admin"


def is_role_removable(
    role_name: str, *, user_id: str, current_user_id: str | None
) -> bool:
    """Check whether ``role_name`` may be removed from ``user_id``."""
    if role_name == USER_ROLE:
        return False
    return not (role_name == ADMIN_ROLE and user_id == current_user_id)


def removable_roles(user: User, current_user_id: str | None) -> list[str]:
    """Return the user's removable role names, sorted by name."""
    return [
        role
        for role in sorted(user.roles)
        if is_role_removable(role, user_id=user.user_id, current_user_id=current_user_id)
    ]


def is_user_deletable(user: User) -> bool:
    """Administrators are never offered for deletion."""
    return ADMIN_ROLE not in user.roles


__all__: list[str] = [
    "USER_ROLE",
    "ADMIN_ROLE",
    "is_role_removable",
    "removable_roles",
    "is_user_deletable",
]
