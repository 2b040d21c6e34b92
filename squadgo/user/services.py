"""Service layer for user profile lookups."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from squadgo.core.constants import USERS_COLLECTION
from squadgo.errors import NotFoundError

if TYPE_CHECKING:
    from squadgo.core.store import DocumentStore
    from squadgo.core.types import UserProfile


class UserProfileLookup:
    """Snapshots user identity into tickets, matches and tournaments.

    Profiles are owned elsewhere; this class only reads them.
    """

    def __init__(self, store: DocumentStore) -> None:
        """Read profiles from ``store``."""
        self.store = store

    def _load(self, user_id: str) -> dict[str, Any]:
        data = self.store.get(USERS_COLLECTION, user_id)
        if data is None:
            raise NotFoundError("User not found.")
        return data

    @staticmethod
    def _profile(user_id: str, data: dict[str, Any], stats: Any) -> UserProfile:
        return {
            "id": user_id,
            "username": data.get("username", ""),
            "displayName": data.get("displayName") or data.get("username", ""),
            "avatar": data.get("avatar"),
            "stats": stats or {},
        }

    def get(self, user_id: str) -> UserProfile:
        """Fetch the public profile of a user."""
        data = self._load(user_id)
        return self._profile(user_id, data, data.get("stats"))

    def snapshot(self, user_id: str, game: str) -> UserProfile:
        """Fetch a profile with ``stats`` narrowed to one game's entry."""
        data = self._load(user_id)
        game_stats = (data.get("gameStats") or {}).get(game)
        return self._profile(user_id, data, game_stats)
