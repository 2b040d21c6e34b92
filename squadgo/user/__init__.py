"""Read-only access to user profiles."""

from .services import UserProfileLookup
from .utils import smart_display_name

__all__ = ["UserProfileLookup", "smart_display_name"]
