"""
Process-wide notification channel.

Any component may publish; a single subscriber (the UI layer, or a test)
receives every notification. Without a subscriber notifications are only
logged.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class NotificationType(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass(frozen=True)
class Notification:
    type: NotificationType
    message: str


Subscriber = Callable[[Notification], None]


class Notifier:
    def __init__(self):
        self._subscriber: Optional[Subscriber] = None

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        """Register the subscriber, replacing any previous one. Returns an unsubscribe callable."""
        self._subscriber = subscriber

        def unsubscribe() -> None:
            if self._subscriber is subscriber:
                self._subscriber = None

        return unsubscribe

    def publish(self, notification: Notification) -> None:
        logger.debug(f"Notification [{notification.type.value}]: {notification.message}")
        if self._subscriber is not None:
            self._subscriber(notification)

    def success(self, message: str) -> None:
        self.publish(Notification(NotificationType.SUCCESS, message))

    def error(self, message: str) -> None:
        self.publish(Notification(NotificationType.ERROR, message))

    def info(self, message: str) -> None:
        self.publish(Notification(NotificationType.INFO, message))


notifier = Notifier()
