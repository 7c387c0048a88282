"""Ports for role administration.

These protocols define the services the host supplies to the panel:
the user directory that owns users and roles, and the provider that
identifies the acting administrator.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")

# ═══════════════════════════════════════════════════════════════
# DATA TRANSFER OBJECTS
# ═══════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class User:
    """A directory user together with the names of the roles it holds.

    Attributes:
        user_id: Unique user identifier in the directory.
        email: Email address, also the search key.
        roles: Names of the assigned roles.
    """

    user_id: str
    email: str
    roles: frozenset[str] = field(default_factory=frozenset)

    def has_role(self, role_name: str) -> bool:
        return role_name in self.roles


@dataclass(frozen=True)
class Role:
    """An assignable role from the directory's catalog.

    Attributes:
        name: Role name.
        description: Human-readable description.
    """

    name: str
    description: str = ""


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of an offset-paginated listing.

    Attributes:
        data: Items of this page, in directory order.
        has_more: Whether another page exists after this one.
    """

    data: list[T]
    has_more: bool = False


# ═══════════════════════════════════════════════════════════════
# USER DIRECTORY PORT
# ═══════════════════════════════════════════════════════════════


@runtime_checkable
class IUserDirectoryService(Protocol):
    """Protocol for the remote service that owns users and roles.

    Implementations: InMemoryUserDirectory, host-provided adapters.

    All methods are async to support remote API calls. Failures are
    raised, preferably as ServiceError subclasses.
    """

    async def list_users(self, limit: int, offset: int) -> Page[User]:
        """List users in directory order.

        Args:
            limit: Maximum number of users to return.
            offset: Number of users to skip.

        Returns:
            The requested page.
        """
        ...

    async def search_by_email(self, query: str, limit: int, offset: int) -> Page[User]:
        """List users whose email matches ``query``.

        Args:
            query: Email fragment to search for.
            limit: Maximum number of users to return.
            offset: Number of matches to skip.

        Returns:
            The requested page of matches.
        """
        ...

    async def list_roles(self) -> list[Role]:
        """List the assignable role catalog."""
        ...

    async def assign_role(self, user_id: str, role_name: str) -> None:
        """Assign a role to a user.

        Raises:
            UserNotFoundError: If the user doesn't exist.
            ServiceError: If the assignment fails.
        """
        ...

    async def remove_role(self, user_id: str, role_name: str) -> None:
        """Remove a role from a user.

        Raises:
            UserNotFoundError: If the user doesn't exist.
            ServiceError: If the removal fails.
        """
        ...

    async def delete_user(self, user_id: str) -> None:
        """Delete a user account.

        Raises:
            UserNotFoundError: If the user doesn't exist.
            ServiceError: If the deletion fails.
        """
        ...


@runtime_checkable
class ICurrentUserProvider(Protocol):
    """Protocol for looking up the authenticated administrator."""

    def current_user_id(self) -> str | None:
        """Return the acting user's ID, or None when nobody is signed in."""
        ...


__all__: list[str] = [
    "User",
    "Role",
    "Page",
    "IUserDirectoryService",
    "ICurrentUserProvider",
]
