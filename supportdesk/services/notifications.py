"""
Notification sink

Success/error signals are fire-and-forget: they are logged and kept in a
short history the dashboard polls. Nothing in the status flow reads them back.
"""
from collections import deque
from typing import Callable, Deque, List, Optional

from supportdesk.models.schemas import Notification, NotificationKind
from supportdesk.utils.logger import get_logger

logger = get_logger(__name__)

NotificationSink = Callable[[Notification], None]


class NotificationLog:
    """Notification sink keeping the most recent notifications in memory"""

    def __init__(self, history_size: int = 50):
        self._history: Deque[Notification] = deque(maxlen=max(1, history_size))

    def __call__(self, notification: Notification) -> None:
        if notification.kind == NotificationKind.ERROR:
            logger.warning(f"{notification.message}: {notification.description or ''}".rstrip(": "))
        else:
            logger.info(notification.message)
        self._history.append(notification)

    def recent(self, limit: Optional[int] = None, ticket_id: Optional[str] = None) -> List[Notification]:
        """
        Most recent notifications first

        Args:
            limit: Maximum number returned
            ticket_id: Only notifications about this ticket
        """
        items = [n for n in reversed(self._history) if ticket_id is None or n.ticket_id == ticket_id]
        return items[:limit] if limit is not None else items

    def clear(self) -> None:
        self._history.clear()
