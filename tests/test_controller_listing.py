"""Tests for browse/search pagination in RoleAdminController."""

from __future__ import annotations

import asyncio

import pytest

from role_admin import RoleAdminConfig, RoleAdminController, ServiceError
from role_admin.instrumentation import HookRegistry

from .fakes import RecordingDirectory, settle

# ═══════════════════════════════════════════════════════════════
# Browse mode
# ═══════════════════════════════════════════════════════════════


class TestLoadAllUsers:
    """load_all_users()."""

    @pytest.mark.asyncio
    async def test_first_page_replaces_list_and_sets_cursor(
        self, controller: RoleAdminController, directory: RecordingDirectory
    ) -> None:
        await controller.load_all_users()

        state = controller.state
        assert len(state.loaded_users) == 50
        assert state.offset == 50
        assert state.has_more is True
        assert state.loading is False
        assert state.search_query == ""
        assert directory.calls_to("list_users") == [(50, 0)]

    @pytest.mark.asyncio
    async def test_sets_loading_while_request_is_pending(
        self, controller: RoleAdminController, directory: RecordingDirectory
    ) -> None:
        gate = asyncio.Event()
        directory.gates["list_users"] = gate

        task = asyncio.create_task(controller.load_all_users())
        await settle()
        assert controller.state.loading is True
        assert controller.state.error_message is None

        gate.set()
        await task
        assert controller.state.loading is False

    @pytest.mark.asyncio
    async def test_failure_sets_error_and_keeps_loaded_users(
        self, controller: RoleAdminController, directory: RecordingDirectory
    ) -> None:
        await controller.load_all_users()
        loaded = controller.state.loaded_users

        directory.failures["list_users"] = ServiceError("backend down")
        await controller.load_all_users()

        state = controller.state
        assert state.loading is False
        assert state.error_message == "backend down"
        assert state.loaded_users == loaded

    @pytest.mark.asyncio
    async def test_failure_keeps_rows_and_leaves_paging_open(
        self, controller: RoleAdminController, directory: RecordingDirectory
    ) -> None:
        await controller.load_all_users()
        shown = controller.state.loaded_users
        directory.failures["list_users"] = ServiceError("backend down")

        await controller.load_all_users()

        state = controller.state
        assert state.loading is False
        assert state.error_message == "backend down"
        assert state.has_more is True
        assert state.offset == 0
        assert state.loaded_users == shown

    @pytest.mark.asyncio
    async def test_load_more_after_failure_replaces_stale_rows(
        self, controller: RoleAdminController, directory: RecordingDirectory
    ) -> None:
        await controller.load_all_users()
        await controller.load_more_users()
        directory.failures["search_by_email"] = ServiceError("backend down")
        await controller.search_users("member-7")
        assert len(controller.state.loaded_users) == 80

        del directory.failures["search_by_email"]
        await controller.load_more_users()

        state = controller.state
        assert [u.user_id for u in state.loaded_users] == ["member-7"] + [
            f"member-{n}" for n in range(70, 80)
        ]
        assert state.offset == 11
        assert state.error_message is None
        assert directory.calls_to("search_by_email")[-1] == ("member-7", 50, 0)

    @pytest.mark.asyncio
    async def test_retry_after_failure_clears_error(
        self, controller: RoleAdminController, directory: RecordingDirectory
    ) -> None:
        directory.failures["list_users"] = ServiceError("backend down")
        await controller.load_all_users()
        assert controller.state.error_message == "backend down"

        del directory.failures["list_users"]
        await controller.load_all_users()

        assert controller.state.error_message is None
        assert controller.state.offset == 50

    @pytest.mark.asyncio
    async def test_failure_without_message_reports_unknown_error(
        self, controller: RoleAdminController, directory: RecordingDirectory
    ) -> None:
        directory.failures["list_users"] = RuntimeError()
        await controller.load_all_users()

        assert controller.state.error_message == "Unknown error"

    @pytest.mark.asyncio
    async def test_plain_exception_message_is_used(
        self, controller: RoleAdminController, directory: RecordingDirectory
    ) -> None:
        directory.failures["list_users"] = ConnectionError("connection reset")
        await controller.load_all_users()

        assert controller.state.error_message == "connection reset"


# ═══════════════════════════════════════════════════════════════
# Pagination
# ═══════════════════════════════════════════════════════════════


class TestLoadMoreUsers:
    """load_more_users()."""

    @pytest.mark.asyncio
    async def test_mount_then_load_more_accumulates_until_exhausted(
        self, controller: RoleAdminController, directory: RecordingDirectory
    ) -> None:
        await controller.start()
        assert len(controller.state.loaded_users) == 50
        assert controller.state.offset == 50

        await controller.load_more_users()

        state = controller.state
        assert len(state.loaded_users) == 80
        assert state.offset == 80
        assert state.has_more is False
        assert directory.calls_to("list_users") == [(50, 0), (50, 50)]

        await controller.load_more_users()
        assert len(directory.calls_to("list_users")) == 2
        assert controller.state.offset == 80

    @pytest.mark.asyncio
    async def test_offset_tracks_sum_of_page_sizes(
        self,
        directory: RecordingDirectory,
        hooks: HookRegistry,
    ) -> None:
        ctrl = RoleAdminController(
            directory,
            config=RoleAdminConfig(page_size=15, success_message_ttl=None),
            hooks=hooks,
        )
        await ctrl.load_all_users()
        while ctrl.state.has_more:
            await ctrl.load_more_users()

        state = ctrl.state
        assert len(state.loaded_users) == state.offset == 80
        assert [u.user_id for u in state.loaded_users] == [
            f"member-{n}" for n in range(80)
        ]
        assert [args[1] for args in directory.calls_to("list_users")] == [
            0, 15, 30, 45, 60, 75,
        ]

    @pytest.mark.asyncio
    async def test_second_call_while_loading_more_is_ignored(
        self, controller: RoleAdminController, directory: RecordingDirectory
    ) -> None:
        await controller.load_all_users()
        gate = asyncio.Event()
        directory.gates["list_users"] = gate

        task = asyncio.create_task(controller.load_more_users())
        await settle()
        assert controller.state.loading_more is True
        before = controller.state

        await controller.load_more_users()

        assert controller.state is before
        assert len(directory.calls_to("list_users")) == 2

        gate.set()
        await task
        assert controller.state.offset == 80

    @pytest.mark.asyncio
    async def test_ignored_while_first_page_is_loading(
        self, controller: RoleAdminController, directory: RecordingDirectory
    ) -> None:
        gate = asyncio.Event()
        directory.gates["list_users"] = gate
        task = asyncio.create_task(controller.load_all_users())
        await settle()

        await controller.load_more_users()

        assert len(directory.calls_to("list_users")) == 1
        gate.set()
        await task

    @pytest.mark.asyncio
    async def test_failure_keeps_users_and_clears_flag(
        self, controller: RoleAdminController, directory: RecordingDirectory
    ) -> None:
        await controller.load_all_users()
        loaded = controller.state.loaded_users
        directory.failures["list_users"] = ServiceError("timeout")

        await controller.load_more_users()

        state = controller.state
        assert state.loading_more is False
        assert state.loaded_users == loaded
        assert state.offset == 50
        assert state.error_message == "timeout"

    @pytest.mark.asyncio
    async def test_page_superseded_by_new_search_is_discarded(
        self, controller: RoleAdminController, directory: RecordingDirectory
    ) -> None:
        await controller.load_all_users()
        gate = asyncio.Event()
        directory.gates["list_users"] = gate
        task = asyncio.create_task(controller.load_more_users())
        await settle()

        await controller.search_users("member-3")
        gate.set()
        await task

        state = controller.state
        assert state.search_query == "member-3"
        assert len(state.loaded_users) == state.offset == 11
        assert state.loading_more is False


# ═══════════════════════════════════════════════════════════════
# Search mode
# ═══════════════════════════════════════════════════════════════


class TestSearchUsers:
    """search_users(query)."""

    @pytest.mark.asyncio
    async def test_search_resets_cursor_and_replaces_browse_results(
        self, controller: RoleAdminController, directory: RecordingDirectory
    ) -> None:
        await controller.load_all_users()
        await controller.load_more_users()

        await controller.search_users("member-7")

        state = controller.state
        assert state.search_query == "member-7"
        assert state.offset == 11
        assert [u.user_id for u in state.loaded_users] == ["member-7"] + [
            f"member-{n}" for n in range(70, 80)
        ]
        assert state.has_more is False
        assert directory.calls_to("search_by_email") == [("member-7", 50, 0)]

    @pytest.mark.asyncio
    async def test_load_more_pages_through_search_results(
        self, directory: RecordingDirectory, hooks: HookRegistry
    ) -> None:
        ctrl = RoleAdminController(
            directory,
            config=RoleAdminConfig(page_size=5, success_message_ttl=None),
            hooks=hooks,
        )
        await ctrl.search_users("member-1")
        assert ctrl.state.offset == 5
        assert ctrl.state.has_more is True

        await ctrl.load_more_users()
        await ctrl.load_more_users()

        state = ctrl.state
        assert state.offset == len(state.loaded_users) == 11
        assert state.has_more is False
        assert directory.calls_to("search_by_email") == [
            ("member-1", 5, 0),
            ("member-1", 5, 5),
            ("member-1", 5, 10),
        ]
        assert directory.calls_to("list_users") == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("blank", ["", "   ", "\t"])
    async def test_blank_query_matches_load_all_users(
        self,
        controller: RoleAdminController,
        directory: RecordingDirectory,
        blank: str,
    ) -> None:
        await controller.load_all_users()
        browse_state = controller.state

        await controller.search_users("member-2")
        await controller.search_users(blank)

        assert controller.state == browse_state
        assert directory.calls_to("search_by_email") == [("member-2", 50, 0)]
        assert directory.calls_to("list_users") == [(50, 0), (50, 0)]

    @pytest.mark.asyncio
    async def test_search_failure_sets_error(
        self, controller: RoleAdminController, directory: RecordingDirectory
    ) -> None:
        directory.failures["search_by_email"] = ServiceError("search unavailable")

        await controller.search_users("alice")

        state = controller.state
        assert state.loading is False
        assert state.search_query == "alice"
        assert state.error_message == "search unavailable"

    @pytest.mark.asyncio
    async def test_results_of_superseded_query_are_discarded(
        self, controller: RoleAdminController, directory: RecordingDirectory
    ) -> None:
        gate = asyncio.Event()
        directory.gates["search_by_email"] = gate

        first = asyncio.create_task(controller.search_users("member-1"))
        await settle()
        second = asyncio.create_task(controller.search_users("member-2"))
        await settle()
        gate.set()
        await asyncio.gather(first, second)

        state = controller.state
        assert state.search_query == "member-2"
        assert [u.user_id for u in state.loaded_users][0] == "member-2"
        assert len(state.loaded_users) == state.offset == 11
        assert state.loading is False


# ═══════════════════════════════════════════════════════════════
# Role catalog
# ═══════════════════════════════════════════════════════════════


class TestLoadAvailableRoles:
    """load_available_roles()."""

    @pytest.mark.asyncio
    async def test_loads_catalog_in_order(
        self, controller: RoleAdminController
    ) -> None:
        await controller.load_available_roles()

        names = [role.name for role in controller.state.available_roles]
        assert names == ["user", "admin", "editor", "viewer"]

    @pytest.mark.asyncio
    async def test_failure_empties_catalog_without_error(
        self, controller: RoleAdminController, directory: RecordingDirectory
    ) -> None:
        await controller.load_available_roles()
        directory.failures["list_roles"] = ServiceError("forbidden")

        await controller.load_available_roles()

        assert controller.state.available_roles == ()
        assert controller.state.error_message is None

    @pytest.mark.asyncio
    async def test_start_loads_users_and_roles(
        self, controller: RoleAdminController, directory: RecordingDirectory
    ) -> None:
        await controller.start()

        assert len(directory.calls_to("list_roles")) == 1
        assert directory.calls_to("list_users") == [(50, 0)]
        assert len(controller.state.available_roles) == 4
        assert controller.state.user_count == 50
