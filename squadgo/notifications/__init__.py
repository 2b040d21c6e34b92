"""Best-effort notification delivery."""

from .services import NotificationDispatcher

__all__ = ["NotificationDispatcher"]
