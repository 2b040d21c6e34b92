"""Core data types for the squadgo application."""

from typing import Any, TypedDict


class _StoreDocumentBase(TypedDict):
    id: str


class StoreDocument(_StoreDocumentBase, total=False):
    """Generic document as returned by a DocumentStore."""

    createdAt: Any
    updatedAt: Any


class UserProfile(TypedDict, total=False):
    """Read-only snapshot of a user profile."""

    id: str
    username: str
    displayName: str
    avatar: str | None
    stats: dict[str, Any]
