"""Test configuration and fixtures."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio

from role_admin import RoleAdminConfig, RoleAdminController
from role_admin.instrumentation import HookRegistry
from role_admin.ports import Role

from .fakes import RecordingDirectory, StaticCurrentUser, make_users


@pytest.fixture
def roles() -> list[Role]:
    return [
        Role("user", "Default role"),
        Role("admin", "Administrator"),
        Role("editor"),
        Role("viewer"),
    ]


@pytest.fixture
def directory(roles: list[Role]) -> RecordingDirectory:
    """80 plain users: a full first page of 50 and a last page of 30."""
    return RecordingDirectory(make_users(80), roles)


@pytest.fixture
def current_user() -> StaticCurrentUser:
    return StaticCurrentUser("admin-1")


@pytest.fixture
def config() -> RoleAdminConfig:
    return RoleAdminConfig(success_message_ttl=None)


@pytest.fixture
def hooks() -> HookRegistry:
    return HookRegistry()


@pytest_asyncio.fixture
async def controller(
    directory: RecordingDirectory,
    current_user: StaticCurrentUser,
    config: RoleAdminConfig,
    hooks: HookRegistry,
) -> AsyncIterator[RoleAdminController]:
    """A controller that has not been started yet."""
    ctrl = RoleAdminController(
        directory, current_user=current_user, config=config, hooks=hooks
    )
    yield ctrl
    await ctrl.wait_idle()
    ctrl.dispose()
