"""Service layer for notifications."""

from __future__ import annotations

import datetime
import logging
from typing import TYPE_CHECKING, Any

from squadgo.core.constants import NOTIFICATIONS_COLLECTION

if TYPE_CHECKING:
    from squadgo.core.store import DocumentStore

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Queues notification documents for the delivery workers.

    Delivery itself (push, in-app feed) happens outside this service. A
    failure to queue is logged and swallowed, never retried.
    """

    def __init__(self, store: DocumentStore) -> None:
        """Write notifications into ``store``."""
        self.store = store

    def enqueue(
        self, notification_type: str, recipient_id: str, payload: dict[str, Any]
    ) -> bool:
        """Queue one notification. Returns False if it could not be written."""
        data = {
            **payload,
            "type": notification_type,
            "recipientId": recipient_id,
            "createdAt": datetime.datetime.now(datetime.timezone.utc),
            "read": False,
        }
        try:
            self.store.add(NOTIFICATIONS_COLLECTION, data)
        except Exception as e:
            logger.error(
                f"Error sending {notification_type} notification to {recipient_id}: {e}"
            )
            return False
        return True

    def enqueue_many(
        self, notification_type: str, recipient_ids: list[str], payload: dict[str, Any]
    ) -> int:
        """Queue the same notification for several recipients."""
        return sum(
            1
            for recipient_id in recipient_ids
            if self.enqueue(notification_type, recipient_id, payload)
        )
