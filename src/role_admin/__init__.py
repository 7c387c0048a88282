"""Role administration view-model.

Lists, searches and pages through directory users, assigns and removes
roles and deletes accounts, delegating every data operation to a
host-supplied IUserDirectoryService.
"""

from __future__ import annotations

from .config import RoleAdminConfig
from .controller import RoleAdminController
from .exceptions import (
    ProviderUnavailableError,
    RoleAdminError,
    RoleNotFoundError,
    ServiceError,
    UserManagementError,
    UserNotFoundError,
)
from .instrumentation import HookRegistry, LoggingHook, get_hook_registry
from .panel import ROLE_ADMIN_PANEL, PanelInfo, RoleAdminPanel
from .policy import ADMIN_ROLE, USER_ROLE
from .ports import ICurrentUserProvider, IUserDirectoryService, Page, Role, User
from .state import DialogState, RoleAdminState

__all__: list[str] = [
    # Controller
    "RoleAdminController",
    "RoleAdminConfig",
    "RoleAdminState",
    "DialogState",
    # Panel
    "RoleAdminPanel",
    "PanelInfo",
    "ROLE_ADMIN_PANEL",
    # Ports
    "IUserDirectoryService",
    "ICurrentUserProvider",
    "User",
    "Role",
    "Page",
    "USER_ROLE",
    "ADMIN_ROLE",
    # Instrumentation
    "HookRegistry",
    "LoggingHook",
    "get_hook_registry",
    # Exceptions
    "RoleAdminError",
    "ServiceError",
    "UserNotFoundError",
    "RoleNotFoundError",
    "UserManagementError",
    "ProviderUnavailableError",
]
