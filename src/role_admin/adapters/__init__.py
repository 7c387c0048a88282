"""User directory adapters."""

from __future__ import annotations

from .memory import InMemoryUserDirectory

__all__: list[str] = ["InMemoryUserDirectory"]
