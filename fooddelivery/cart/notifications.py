"""
Cart Notifications

User-facing messages emitted by the cart store ("Garlic Naan added to cart").
The default notifier just logs; a UI would plug in its own toast sink.
"""

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class BaseNotifier(ABC):

    @abstractmethod
    def success(self, message: str) -> None:
        pass


class LoggingNotifier(BaseNotifier):
    """Writes notifications to the application log."""

    def success(self, message: str) -> None:
        logger.info(f"[cart] {message}")


class RecordingNotifier(BaseNotifier):
    """Keeps every message in memory."""

    def __init__(self):
        self.messages: list[str] = []

    def success(self, message: str) -> None:
        self.messages.append(message)
