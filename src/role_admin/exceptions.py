"""Role administration exceptions.

All errors inherit from RoleAdminError. Failures reported by a user
directory are ServiceError instances and always carry a ``message``.
"""

from __future__ import annotations

UNKNOWN_ERROR = "Unknown error"


class RoleAdminError(Exception):
    """Root exception for the role administration package."""


# ═══════════════════════════════════════════════════════════════
# DIRECTORY ERRORS
# ═══════════════════════════════════════════════════════════════


class ServiceError(RoleAdminError):
    """Raised by a user directory when a remote call fails.

    Attributes:
        message: Human-readable failure description shown to the operator.
    """

    def __init__(self, message: str | None = None) -> None:
        self.message = message
        super().__init__(message or UNKNOWN_ERROR)


class UserNotFoundError(ServiceError):
    """Raised when the target user does not exist."""

    def __init__(self, user_id: str) -> None:
        self.user_id = user_id
        super().__init__(f"User {user_id} not found")


class RoleNotFoundError(ServiceError):
    """Raised when a role is not part of the directory's catalog."""

    def __init__(self, role_name: str) -> None:
        self.role_name = role_name
        super().__init__(f"Role {role_name} not found")


class UserManagementError(ServiceError):
    """Raised when a user management operation is rejected."""


# ═══════════════════════════════════════════════════════════════
# PANEL ERRORS
# ═══════════════════════════════════════════════════════════════


class ProviderUnavailableError(RoleAdminError):
    """Raised when the panel is used without its required providers."""


def describe_failure(exc: BaseException) -> str:
    """Return the operator-facing message for a failed directory call."""
    message = getattr(exc, "message", None)
    if message:
        return str(message)
    return str(exc) or UNKNOWN_ERROR


__all__: list[str] = [
    "UNKNOWN_ERROR",
    "RoleAdminError",
    "ServiceError",
    "UserNotFoundError",
    "RoleNotFoundError",
    "UserManagementError",
    "ProviderUnavailableError",
    "describe_failure",
]
