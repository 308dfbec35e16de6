"""
Notification port - informed of outcomes, never drives logic.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict
import logging

logger = logging.getLogger(__name__)


class Notifier(ABC):

    @abstractmethod
    def notify(self, event: str, payload: Dict[str, Any]) -> None:
        raise NotImplementedError


class LoggingNotifier(Notifier):
    """Default notifier: one log line per event."""

    def notify(self, event: str, payload: Dict[str, Any]) -> None:
        logger.info(f"[NOTIFY] {event}: {payload}")
