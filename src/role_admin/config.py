"""Controller configuration."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_PAGE_SIZE = 50
DEFAULT_SUCCESS_MESSAGE_TTL = 3.0


class RoleAdminConfig(BaseModel):
    """Settings for a RoleAdminController.

    Attributes:
        page_size: Users requested per page, in browse and search mode.
        success_message_ttl: Seconds a success message stays visible
            before it is cleared. ``None`` keeps it until cleared manually.
    """

    model_config = ConfigDict(frozen=True)

    page_size: int = Field(default=DEFAULT_PAGE_SIZE, gt=0)
    success_message_ttl: float | None = Field(
        default=DEFAULT_SUCCESS_MESSAGE_TTL, gt=0
    )
