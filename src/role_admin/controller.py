"""RoleAdminController: pagination, search and mutation state machine.

The controller mediates between a view and an IUserDirectoryService. Every
change produces a new RoleAdminState snapshot which is published to
subscribed listeners and exposed through ``controller.state``.

Usage::

    controller = RoleAdminController(directory, current_user=auth)
    unsubscribe = controller.subscribe(view.render)
    await controller.start()

    await controller.search_users("alice@")
    await controller.load_more_users()
    await controller.assign_role(user.user_id, "editor")

    controller.dispose()

Directory failures never propagate: they are captured into
``state.error_message``.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from .config import RoleAdminConfig
from .exceptions import describe_failure
from .instrumentation import get_hook_registry
from .policy import is_user_deletable, removable_roles
from .state import DialogState, RoleAdminState

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Coroutine

    from .instrumentation import HookRegistry
    from .ports import ICurrentUserProvider, IUserDirectoryService, Page, User

logger = logging.getLogger("role_admin.controller")


class RoleAdminController:
    """View-model for the admin role management panel.

    Busy flags only gate re-entrant calls of the same kind: a mutation may
    be issued while a reload is still in flight, and the last completion
    wins. After :meth:`dispose` no continuation writes state.
    """

    def __init__(
        self,
        directory: IUserDirectoryService,
        *,
        current_user: ICurrentUserProvider | None = None,
        config: RoleAdminConfig | None = None,
        hooks: HookRegistry | None = None,
    ) -> None:
        self._directory = directory
        self._current_user = current_user
        self._config = config or RoleAdminConfig()
        self._hooks = hooks if hooks is not None else get_hook_registry()
        self._state = RoleAdminState()
        self._listeners: list[Callable[[RoleAdminState], None]] = []
        self._background: set[asyncio.Task[Any]] = set()
        self._message_timer: asyncio.Task[None] | None = None
        self._disposed = False

    @property
    def state(self) -> RoleAdminState:
        return self._state

    @property
    def config(self) -> RoleAdminConfig:
        return self._config

    @property
    def page_size(self) -> int:
        return self._config.page_size

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def current_user_id(self) -> str | None:
        if self._current_user is None:
            return None
        return self._current_user.current_user_id()

    # ── Observation ──────────────────────────────────────────────────

    def subscribe(
        self, listener: Callable[[RoleAdminState], None]
    ) -> Callable[[], None]:
        """Register ``listener`` for every new snapshot.

        Returns:
            A callable that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _commit(self, **changes: Any) -> bool:
        """Replace the state snapshot and notify listeners.

        Returns False (and changes nothing) once the controller is disposed.
        """
        if self._disposed:
            return False
        self._state = replace(self._state, **changes)
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                logger.exception("State listener %r failed", listener)
        return True

    # ── Lifecycle ────────────────────────────────────────────────────

    async def start(self) -> None:
        """Run the initial user load and role catalog load."""
        logger.info("Starting role admin controller (page_size=%d)", self.page_size)
        await asyncio.gather(self.load_all_users(), self.load_available_roles())

    async def wait_idle(self) -> None:
        """Wait until every background reload has finished."""
        while True:
            pending = [task for task in self._background if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    def dispose(self) -> None:
        """Stop publishing state and cancel background work."""
        if self._disposed:
            return
        self._disposed = True
        for task in list(self._background):
            task.cancel()
        self._background.clear()
        if self._message_timer is not None:
            self._message_timer.cancel()
            self._message_timer = None
        self._listeners.clear()
        logger.debug("Role admin controller disposed")

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._on_background_done)

    def _on_background_done(self, task: asyncio.Task[Any]) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning("Background reload failed: %s", exc, exc_info=exc)

    # ── Directory access ─────────────────────────────────────────────

    async def _call(
        self,
        operation: str,
        call: Callable[[], Awaitable[Any]],
        **attributes: Any,
    ) -> Any:
        return await self._hooks.execute_all(f"directory.{operation}", attributes, call)

    async def _fetch_page(self, query: str, offset: int) -> Page[User]:
        limit = self.page_size
        if query.strip():
            return await self._call(
                "search_by_email",
                lambda: self._directory.search_by_email(query, limit=limit, offset=offset),
                query=query,
                limit=limit,
                offset=offset,
            )
        return await self._call(
            "list_users",
            lambda: self._directory.list_users(limit=limit, offset=offset),
            limit=limit,
            offset=offset,
        )

    # ── Listing ──────────────────────────────────────────────────────

    async def load_all_users(self) -> None:
        """Switch to browse mode and load the first page of all users."""
        if self._disposed:
            return
        self._commit(
            loading=True,
            loading_more=False,
            error_message=None,
            search_query="",
            offset=0,
            has_more=True,
        )
        await self._load_first_page("")

    async def search_users(self, query: str) -> None:
        """Switch to search mode and load the first page of email matches.

        A blank query drops back to browse mode.
        """
        if not query.strip():
            await self.load_all_users()
            return
        if self._disposed:
            return
        self._commit(
            search_query=query,
            loading=True,
            loading_more=False,
            error_message=None,
            offset=0,
            has_more=True,
        )
        await self._load_first_page(query)

    async def _load_first_page(self, query: str) -> None:
        try:
            page = await self._fetch_page(query, 0)
        except Exception as exc:
            if self._state.search_query != query:
                return
            logger.warning("Loading users failed: %s", exc)
            self._commit(loading=False, error_message=describe_failure(exc))
            return

        if self._state.search_query != query:
            logger.debug("Discarding first page for superseded query %r", query)
            return
        users = tuple(page.data)
        self._commit(
            loaded_users=users,
            loading=False,
            offset=len(users),
            has_more=page.has_more,
        )

    async def load_more_users(self) -> None:
        """Append the next page in the current mode.

        Does nothing while a page is loading or when no page is left.
        """
        state = self._state
        if self._disposed or state.loading_more or not state.has_more or state.loading:
            logger.debug("load_more_users ignored")
            return

        query, offset = state.search_query, state.offset
        self._commit(loading_more=True, error_message=None)
        try:
            page = await self._fetch_page(query, offset)
        except Exception as exc:
            if self._is_current_cursor(query, offset):
                logger.warning("Loading more users failed: %s", exc)
                self._commit(loading_more=False, error_message=describe_failure(exc))
            return

        if not self._is_current_cursor(query, offset):
            logger.debug("Discarding page at offset %d for superseded listing", offset)
            return
        # At offset 0 no row belongs to this listing yet: the page replaces them.
        shown = self._state.loaded_users if offset else ()
        self._commit(
            loaded_users=shown + tuple(page.data),
            loading_more=False,
            offset=offset + len(page.data),
            has_more=page.has_more,
        )

    def _is_current_cursor(self, query: str, offset: int) -> bool:
        state = self._state
        return (
            state.loading_more
            and state.search_query == query
            and state.offset == offset
        )

    async def load_available_roles(self) -> None:
        """Load the role catalog. Failures leave an empty catalog."""
        if self._disposed:
            return
        try:
            roles = await self._call("list_roles", self._directory.list_roles)
        except Exception as exc:
            logger.warning("Loading role catalog failed: %s", exc)
            self._commit(available_roles=())
            return
        self._commit(available_roles=tuple(roles))

    # ── Mutations ────────────────────────────────────────────────────

    async def assign_role(self, user_id: str, role_name: str) -> bool:
        """Assign ``role_name`` to a user, then reload the full user list."""
        return await self._mutate(
            "assign role",
            "assign_role",
            lambda: self._directory.assign_role(user_id, role_name),
            success_message=f"Role {role_name} assigned successfully",
            reload=self.load_all_users,
            user_id=user_id,
            role_name=role_name,
        )

    async def remove_role(self, user_id: str, role_name: str) -> bool:
        """Remove ``role_name`` from a user, then reload the full user list."""
        return await self._mutate(
            "remove role",
            "remove_role",
            lambda: self._directory.remove_role(user_id, role_name),
            success_message=f"Role {role_name} removed successfully",
            reload=self.load_all_users,
            user_id=user_id,
            role_name=role_name,
        )

    async def delete_user(self, user_id: str) -> bool:
        """Delete a user, then re-run the current listing."""
        return await self._mutate(
            "delete user",
            "delete_user",
            lambda: self._directory.delete_user(user_id),
            success_message="User deleted successfully",
            reload=self._reload_current_listing,
            user_id=user_id,
        )

    def _reload_current_listing(self) -> Coroutine[Any, Any, None]:
        query = self._state.search_query
        if query.strip():
            return self.search_users(query)
        return self.load_all_users()

    async def _mutate(
        self,
        action: str,
        operation: str,
        call: Callable[[], Awaitable[None]],
        *,
        success_message: str,
        reload: Callable[[], Coroutine[Any, Any, None]],
        **attributes: Any,
    ) -> bool:
        """Run a mutation and schedule the reload without awaiting it.

        Returns:
            True if the directory accepted the mutation.
        """
        if self._disposed:
            return False
        self._commit(operation_in_progress=True, error_message=None)
        try:
            await self._call(operation, call, **attributes)
        except Exception as exc:
            logger.warning("Failed to %s: %s", action, exc)
            self._commit(
                operation_in_progress=False,
                error_message=f"Failed to {action}: {describe_failure(exc)}",
            )
            return False

        if self._commit(operation_in_progress=False, success_message=success_message):
            logger.info("%s", success_message)
            self._schedule_success_expiry(success_message)
            self._spawn(reload())
        return True

    def _schedule_success_expiry(self, message: str) -> None:
        ttl = self._config.success_message_ttl
        if ttl is None:
            return
        if self._message_timer is not None:
            self._message_timer.cancel()
        self._message_timer = asyncio.get_running_loop().create_task(
            self._expire_success_message(message, ttl)
        )

    async def _expire_success_message(self, message: str, ttl: float) -> None:
        await asyncio.sleep(ttl)
        if self._state.success_message == message:
            self._commit(success_message=None)

    # ── Selection and dialogs ────────────────────────────────────────

    def select_user(self, user: User) -> None:
        self._commit(selected_user=user)

    def clear_selected_user(self) -> None:
        """Drop the selection, closing any dialog that targets it."""
        self._commit(
            selected_user=None,
            dialog_state=DialogState.NONE,
            role_to_assign=None,
            role_to_remove=None,
        )

    def show_assign_role_dialog(self, user: User) -> None:
        self._commit(selected_user=user, dialog_state=DialogState.ASSIGN_ROLE)

    def hide_assign_role_dialog(self) -> None:
        self._close_dialog(DialogState.ASSIGN_ROLE, role_to_assign=None)

    def show_remove_role_dialog(self, user: User, role_name: str) -> None:
        self._commit(
            selected_user=user,
            role_to_remove=role_name,
            dialog_state=DialogState.REMOVE_ROLE,
        )

    def hide_remove_role_dialog(self) -> None:
        self._close_dialog(DialogState.REMOVE_ROLE, role_to_remove=None)

    def show_delete_user_dialog(self, user: User) -> None:
        self._commit(selected_user=user, dialog_state=DialogState.DELETE_USER)

    def hide_delete_user_dialog(self) -> None:
        self._close_dialog(DialogState.DELETE_USER)

    def _close_dialog(self, dialog: DialogState, **changes: Any) -> None:
        # selected_user survives closing; the next show_* overwrites it.
        if self._state.dialog_state is dialog:
            changes["dialog_state"] = DialogState.NONE
        if changes:
            self._commit(**changes)

    def set_role_to_assign(self, role_name: str) -> None:
        self._commit(role_to_assign=role_name)

    async def confirm_assign_role(self) -> bool:
        """Close the assign dialog and assign the chosen role, if any."""
        state = self._state
        if state.dialog_state is not DialogState.ASSIGN_ROLE or state.selected_user is None:
            return False
        self.hide_assign_role_dialog()
        if state.role_to_assign is None:
            return False
        return await self.assign_role(state.selected_user.user_id, state.role_to_assign)

    async def confirm_remove_role(self) -> bool:
        """Close the remove dialog and remove the pending role."""
        state = self._state
        if (
            state.dialog_state is not DialogState.REMOVE_ROLE
            or state.selected_user is None
            or state.role_to_remove is None
        ):
            return False
        self.hide_remove_role_dialog()
        return await self.remove_role(state.selected_user.user_id, state.role_to_remove)

    async def confirm_delete_user(self) -> bool:
        """Close the delete dialog and delete the selected user."""
        state = self._state
        if state.dialog_state is not DialogState.DELETE_USER or state.selected_user is None:
            return False
        self.hide_delete_user_dialog()
        return await self.delete_user(state.selected_user.user_id)

    # ── Queries ──────────────────────────────────────────────────────

    def available_roles_for_user(self, user: User) -> list[str]:
        """Catalog role names the user does not hold yet, in catalog order."""
        return [
            role.name
            for role in self._state.available_roles
            if role.name not in user.roles
        ]

    def removable_roles_for_user(self, user: User) -> list[str]:
        return removable_roles(user, self.current_user_id)

    def can_delete_user(self, user: User) -> bool:
        return is_user_deletable(user)

    # ── Status messages ──────────────────────────────────────────────

    def clear_success_message(self) -> None:
        self._commit(success_message=None)

    def clear_error_message(self) -> None:
        self._commit(error_message=None)


__all__: list[str] = ["RoleAdminController"]
