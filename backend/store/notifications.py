# backend/store/notifications.py
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

logger = logging.getLogger(__name__)

SUCCESS = "success"
ERROR = "error"
INFO = "info"


@dataclass(frozen=True)
class Notification:
    level: str
    message: str


class Notifier(ABC):
    """User-facing messages emitted by the cart and wishlist stores."""

    @abstractmethod
    def emit(self, notification: Notification) -> None:
        ...

    def success(self, message: str) -> None:
        self.emit(Notification(SUCCESS, message))

    def error(self, message: str) -> None:
        self.emit(Notification(ERROR, message))

    def info(self, message: str) -> None:
        self.emit(Notification(INFO, message))


class LogNotifier(Notifier):
    _levels = {SUCCESS: logging.INFO, INFO: logging.INFO, ERROR: logging.WARNING}

    def emit(self, notification: Notification) -> None:
        logger.log(self._levels.get(notification.level, logging.INFO), "[%s] %s", notification.level, notification.message)
