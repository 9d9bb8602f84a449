"""Desktop notification sink fed by the monitor's ``notification`` channel."""

from __future__ import annotations

import logging
from typing import Callable

from mlb_notifier.schemas import NotificationEntry

logger = logging.getLogger(__name__)

# (title, body, silent)
DisplayFn = Callable[[str, str, bool], None]


def _log_display(title: str, body: str, silent: bool) -> None:
    logger.info("[notify%s] %s | %s", "" if silent else " +sound", title, body)


class Notifier:
    """Fire-and-forget display of score notifications.

    ``settings_provider`` is called per notification on the event loop, so it
    must return an in-memory snapshot rather than query the database.
    """

    def __init__(self, settings_provider: Callable, display: DisplayFn | None = None) -> None:
        self._settings_provider = settings_provider
        self._display = display or _log_display

    def show(self, notification: NotificationEntry) -> None:
        settings = self._settings_provider()
        if not settings.notifications_enabled:
            logger.info("Notifications disabled in settings, skipping desktop notification")
            return
        try:
            self._display(notification.title, notification.body, not settings.sound_enabled)
        except Exception:
            logger.exception("Failed to show notification")
