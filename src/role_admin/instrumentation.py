"""Instrumentation hooks wrapped around every user directory call."""

from __future__ import annotations

import fnmatch
import logging
import time
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger("role_admin.instrumentation")


@runtime_checkable
class DirectoryCallHook(Protocol):
    """Protocol for hooks (tracing, metrics, logging) around directory calls."""

    async def __call__(
        self,
        operation: str,
        attributes: dict[str, Any],
        next_handler: Callable[[], Awaitable[Any]],
    ) -> Any:
        """Wrap a directory call."""
        ...


class HookRegistration:
    """A registered hook with filtering and priority."""

    def __init__(
        self,
        hook: DirectoryCallHook,
        *,
        priority: int = 0,
        predicate: Callable[[str, dict[str, Any]], bool] | None = None,
        operations: list[str] | None = None,
        enabled: bool = True,
    ) -> None:
        self.hook = hook
        self.priority = priority
        self.predicate = predicate
        self.operations = operations or []
        self.enabled = enabled

    def matches(self, operation: str, attributes: dict[str, Any]) -> bool:
        """Check if this registration applies to the call."""
        if not self.enabled:
            return False
        if self.predicate is not None and not self.predicate(operation, attributes):
            return False
        if not self.operations:
            return True
        return any(fnmatch.fnmatch(operation, pattern) for pattern in self.operations)


class HookRegistry:
    """Ordered set of hooks; lower priority runs outermost."""

    def __init__(self) -> None:
        self._registrations: list[HookRegistration] = []

    def register(
        self,
        hook: DirectoryCallHook,
        *,
        priority: int = 0,
        predicate: Callable[[str, dict[str, Any]], bool] | None = None,
        operations: list[str] | None = None,
        enabled: bool = True,
    ) -> HookRegistration:
        """Register a hook with optional filtering."""
        registration = HookRegistration(
            hook,
            priority=priority,
            predicate=predicate,
            operations=operations,
            enabled=enabled,
        )
        self._registrations.append(registration)
        self._registrations.sort(key=lambda r: r.priority)
        return registration

    def unregister(self, registration: HookRegistration) -> None:
        if registration in self._registrations:
            self._registrations.remove(registration)

    async def execute_all(
        self,
        operation: str,
        attributes: dict[str, Any],
        next_handler: Callable[[], Awaitable[Any]],
    ) -> Any:
        """Run ``next_handler`` through every matching hook in priority order."""
        matching = [r for r in self._registrations if r.matches(operation, attributes)]
        if not matching:
            return await next_handler()

        async def pipeline(index: int = 0) -> Any:
            if index >= len(matching):
                return await next_handler()
            return await matching[index].hook(
                operation,
                attributes,
                lambda: pipeline(index + 1),
            )

        return await pipeline()

    def clear(self) -> None:
        self._registrations.clear()

    def __len__(self) -> int:
        return len(self._registrations)


class LoggingHook:
    """Logs each directory call with its duration."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logger

    async def __call__(
        self,
        operation: str,
        attributes: dict[str, Any],
        next_handler: Callable[[], Awaitable[Any]],
    ) -> Any:
        self._log.debug("Calling %s %s", operation, attributes)
        start = time.perf_counter()
        try:
            result = await next_handler()
        except Exception:
            elapsed = (time.perf_counter() - start) * 1000
            self._log.warning("%s failed after %.2fms", operation, elapsed)
            raise
        elapsed = (time.perf_counter() - start) * 1000
        self._log.info("%s completed in %.2fms", operation, elapsed)
        return result


_hook_registry_var: ContextVar[HookRegistry | None] = ContextVar(
    "role_admin_hook_registry", default=None
)


def get_hook_registry() -> HookRegistry:
    """Get the hook registry for the current context.

    A fresh registry is created on first access within each context, so
    registrations do not leak across tasks or tests.
    """
    registry = _hook_registry_var.get()
    if registry is None:
        registry = HookRegistry()
        _hook_registry_var.set(registry)
    return registry


def set_hook_registry(registry: HookRegistry) -> None:
    """Set a custom hook registry in the current context."""
    _hook_registry_var.set(registry)


__all__: list[str] = [
    "DirectoryCallHook",
    "HookRegistration",
    "HookRegistry",
    "LoggingHook",
    "get_hook_registry",
    "set_hook_registry",
]
