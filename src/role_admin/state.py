"""RoleAdminState: immutable snapshot of the panel's view-model."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .ports import Role, User


class DialogState(str, Enum):
    """The dialog currently open in the panel. At most one is open."""

    NONE = "none"
    ASSIGN_ROLE = "assign_role"
    REMOVE_ROLE = "remove_role"
    DELETE_USER = "delete_user"


@dataclass(frozen=True)
class RoleAdminState:
    """Everything the view renders, replaced wholesale on every change.

    ``offset`` counts the users fetched so far, not pages, so
    ``len(loaded_users) == offset`` after every successful load.
    An empty ``search_query`` means browse mode.
    """

    loaded_users: tuple[User, ...] = ()
    search_query: str = ""
    loading: bool = False
    loading_more: bool = False
    operation_in_progress: bool = False
    error_message: str | None = None
    success_message: str | None = None
    selected_user: User | None = None
    role_to_assign: str | None = None
    role_to_remove: str | None = None
    dialog_state: DialogState = DialogState.NONE
    available_roles: tuple[Role, ...] = ()
    offset: int = 0
    has_more: bool = True

    @property
    def is_search_mode(self) -> bool:
        return bool(self.search_query.strip())

    @property
    def user_count(self) -> int:
        return len(self.loaded_users)

    @property
    def is_busy(self) -> bool:
        return self.loading or self.loading_more or self.operation_in_progress
