"""In-memory user directory for development and testing.

WARNING: This implementation is NOT suitable for production use.
Data lives in a local dictionary and is lost on restart.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..exceptions import RoleNotFoundError, UserNotFoundError
from ..ports import IUserDirectoryService, Page, Role, User

if TYPE_CHECKING:
    from collections.abc import Iterable


class InMemoryUserDirectory(IUserDirectoryService):
    """In-memory implementation of IUserDirectoryService.

    Users keep their insertion order, which is also the listing order.
    Email search is a case-insensitive substring match.

    Example:
        ```python
        directory = InMemoryUserDirectory(
            roles=[Role("user"), Role("admin"), Role("editor")],
        )
        directory.add_user(User("u1", "alice@example.com", frozenset({"user"})))

        page = await directory.search_by_email("alice", limit=50, offset=0)
        await directory.assign_role("u1", "editor")
        ```
    """

    def __init__(
        self,
        users: Iterable[User] = (),
        roles: Iterable[Role] = (),
    ) -> None:
        """Initialize the directory.

        Args:
            users: Initial users, in listing order.
            roles: Role catalog, in display order.
        """
        self._users: dict[str, User] = {}
        self._roles: dict[str, Role] = {role.name: role for role in roles}
        for user in users:
            self.add_user(user)

    # ═══════════════════════════════════════════════════════════════
    # SEEDING
    # ═══════════════════════════════════════════════════════════════

    def add_user(self, user: User) -> None:
        """Insert or replace a user."""
        self._users[user.user_id] = user

    def add_role(self, role: Role) -> None:
        """Add a role to the catalog."""
        self._roles[role.name] = role

    def get_user(self, user_id: str) -> User | None:
        return self._users.get(user_id)

    def count(self) -> int:
        return len(self._users)

    # ═══════════════════════════════════════════════════════════════
    # IUserDirectoryService
    # ═══════════════════════════════════════════════════════════════

    async def list_users(self, limit: int, offset: int) -> Page[User]:
        return self._paginate(list(self._users.values()), limit, offset)

    async def search_by_email(self, query: str, limit: int, offset: int) -> Page[User]:
        needle = query.strip().lower()
        matches = [u for u in self._users.values() if needle in u.email.lower()]
        return self._paginate(matches, limit, offset)

    async def list_roles(self) -> list[Role]:
        return list(self._roles.values())

    async def assign_role(self, user_id: str, role_name: str) -> None:
        user = self._require_user(user_id)
        if role_name not in self._roles:
            raise RoleNotFoundError(role_name)
        self._users[user_id] = User(
            user.user_id, user.email, user.roles | {role_name}
        )

    async def remove_role(self, user_id: str, role_name: str) -> None:
        user = self._require_user(user_id)
        self._users[user_id] = User(
            user.user_id, user.email, user.roles - {role_name}
        )

    async def delete_user(self, user_id: str) -> None:
        self._require_user(user_id)
        del self._users[user_id]

    # ═══════════════════════════════════════════════════════════════
    # HELPER METHODS
    # ═══════════════════════════════════════════════════════════════

    def _require_user(self, user_id: str) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    @staticmethod
    def _paginate(users: list[User], limit: int, offset: int) -> Page[User]:
        window = users[offset : offset + limit]
        return Page(data=window, has_more=offset + limit < len(users))


__all__: list[str] = ["InMemoryUserDirectory"]
