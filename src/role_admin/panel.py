"""RoleAdminPanel: host-facing lifecycle for the role management panel.

The host resolves its providers once and hands them to the panel. A panel
missing either provider stays unavailable and never creates a controller.

Usage::

    panel = RoleAdminPanel(directory=host.user_directory, current_user=host.auth)
    async with panel:
        controller = panel.controller
        ...
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .controller import RoleAdminController
from .exceptions import ProviderUnavailableError

if TYPE_CHECKING:
    from types import TracebackType

    from .config import RoleAdminConfig
    from .instrumentation import HookRegistry
    from .ports import ICurrentUserProvider, IUserDirectoryService

logger = logging.getLogger("role_admin.panel")

PROVIDERS_UNAVAILABLE_MESSAGE = (
    "User management and auth providers are required to manage roles."
)


@dataclass(frozen=True)
class PanelInfo:
    """Static description the host uses to list the panel."""

    panel_id: str
    display_name: str
    description: str = ""


ROLE_ADMIN_PANEL = PanelInfo(
    panel_id="admin-role-management",
    display_name="Admin Role Management",
    description="Manage user roles and permissions",
)


class RoleAdminPanel:
    """Owns one RoleAdminController between mount and unmount."""

    info = ROLE_ADMIN_PANEL

    def __init__(
        self,
        directory: IUserDirectoryService | None,
        current_user: ICurrentUserProvider | None,
        *,
        config: RoleAdminConfig | None = None,
        hooks: HookRegistry | None = None,
    ) -> None:
        self._directory = directory
        self._current_user = current_user
        self._config = config
        self._hooks = hooks
        self._controller: RoleAdminController | None = None

    @property
    def available(self) -> bool:
        return self._directory is not None and self._current_user is not None

    @property
    def unavailable_reason(self) -> str | None:
        return None if self.available else PROVIDERS_UNAVAILABLE_MESSAGE

    @property
    def mounted(self) -> bool:
        return self._controller is not None

    @property
    def controller(self) -> RoleAdminController:
        """The mounted controller.

        Raises:
            ProviderUnavailableError: If the panel lacks providers.
            RuntimeError: If the panel is not mounted.
        """
        if not self.available:
            raise ProviderUnavailableError(PROVIDERS_UNAVAILABLE_MESSAGE)
        if self._controller is None:
            raise RuntimeError(f"{self.info.display_name} panel is not mounted")
        return self._controller

    async def mount(self) -> None:
        """Create the controller and run the initial loads."""
        if self._controller is not None:
            return
        if self._directory is None or self._current_user is None:
            logger.warning(
                "%s mounted without providers", self.info.display_name
            )
            return
        self._controller = RoleAdminController(
            self._directory,
            current_user=self._current_user,
            config=self._config,
            hooks=self._hooks,
        )
        logger.info("Mounted %s", self.info.panel_id)
        await self._controller.start()

    async def unmount(self) -> None:
        """Dispose the controller; in-flight calls can no longer write state."""
        if self._controller is None:
            return
        self._controller.dispose()
        self._controller = None
        logger.info("Unmounted %s", self.info.panel_id)

    async def __aenter__(self) -> RoleAdminPanel:
        await self.mount()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.unmount()


__all__: list[str] = [
    "PanelInfo",
    "ROLE_ADMIN_PANEL",
    "PROVIDERS_UNAVAILABLE_MESSAGE",
    "RoleAdminPanel",
]
