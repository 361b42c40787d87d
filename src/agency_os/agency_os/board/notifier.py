from __future__ import annotations

import logging
from typing import Protocol

from flask import flash

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """One-shot user-visible messages (toasts)."""

    def success(self, message: str) -> None:
        raise NotImplementedError

    def error(self, message: str) -> None:
        raise NotImplementedError

    def warning(self, message: str) -> None:
        raise NotImplementedError


class FlashNotifier(Notifier):
    """Queue messages with Flask's flash(); needs a request context."""

    def success(self, message: str) -> None:
        flash(message, "success")

    def error(self, message: str) -> None:
        flash(message, "danger")

    def warning(self, message: str) -> None:
        flash(message, "warning")


class CollectingNotifier(Notifier):
    """Keeps messages in memory as (category, message) pairs."""

    def __init__(self):
        self.messages: list[tuple[str, str]] = []

    def success(self, message: str) -> None:
        self.messages.append(("success", message))

    def error(self, message: str) -> None:
        logger.warning("board error: %s", message)
        self.messages.append(("danger", message))

    def warning(self, message: str) -> None:
        self.messages.append(("warning", message))
