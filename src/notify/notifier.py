# src/notify/notifier.py
"""Transient user-facing notifications ("toasts").

The CRM layer reports outcomes here; rendering is the consumer's concern.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Literal

logger = logging.getLogger(__name__)

Level = Literal["success", "error"]


class BaseNotifier(ABC):
    """Sink for success/error notifications."""

    @abstractmethod
    def success(self, message: str) -> None:
        """Report a successful user action."""

    @abstractmethod
    def error(self, message: str) -> None:
        """Report a failed user action."""


class LogNotifier(BaseNotifier):
    """Writes notifications to the ``realtycrm.notify`` logger."""

    def success(self, message: str) -> None:
        logger.info(message)

    def error(self, message: str) -> None:
        logger.warning(message)


class CollectingNotifier(BaseNotifier):
    """Keeps notifications in order for later display."""

    def __init__(self) -> None:
        self._items: list[tuple[Level, str]] = []

    def success(self, message: str) -> None:
        self._items.append(("success", message))

    def error(self, message: str) -> None:
        self._items.append(("error", message))

    @property
    def items(self) -> list[tuple[Level, str]]:
        return list(self._items)

    def messages(self, level: Level | None = None) -> list[str]:
        return [m for lvl, m in self._items if level is None or lvl == level]

    def drain(self) -> list[tuple[Level, str]]:
        """Return and forget everything collected so far."""
        items, self._items = self._items, []
        return items
