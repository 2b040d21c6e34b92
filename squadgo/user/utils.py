"""Utility functions for user data."""

from __future__ import annotations

from typing import Any


def smart_display_name(user: dict[str, Any]) -> str:
    """Return the name to show for a user.

    Prefers the display name, then the username, then the id.
    """
    return (
        user.get("displayName")
        or user.get("username")
        or user.get("id")
        or "Unknown Player"
    )
