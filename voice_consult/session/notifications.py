"""User-visible notifications raised by call sessions."""

import logging
from collections import deque
from typing import Deque, List

from voice_consult.config.constants import LOGGER_NAME
from voice_consult.models.call import Notification, NotificationLevel

logger = logging.getLogger(LOGGER_NAME)

MAX_PENDING = 50


class Notifier:
    """
    Queue of notifications waiting to be shown to the user.

    Only the newest MAX_PENDING notifications are kept.
    """

    def __init__(self, max_pending: int = MAX_PENDING):
        self._pending: Deque[Notification] = deque(maxlen=max_pending)

    def notify(self, level: NotificationLevel, message: str) -> Notification:
        # Keep notices single-line
        message = " ".join(str(message).split())
        notification = Notification(level=level, message=message)
        self._pending.append(notification)
        logger.info(f"Notification [{level.value}]: {message}")
        return notification

    def error(self, message: str) -> Notification:
        return self.notify(NotificationLevel.ERROR, message)

    def success(self, message: str) -> Notification:
        return self.notify(NotificationLevel.SUCCESS, message)

    def info(self, message: str) -> Notification:
        return self.notify(NotificationLevel.INFO, message)

    def pending(self) -> List[Notification]:
        return list(self._pending)

    def drain(self) -> List[Notification]:
        """Return and clear all pending notifications."""
        notifications = list(self._pending)
        self._pending.clear()
        return notifications
