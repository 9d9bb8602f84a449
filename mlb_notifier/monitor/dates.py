"""Sporting-day resolution in the feed source's own calendar."""

from __future__ import annotations

import logging
import os
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)
SOURCE_TIMEZONE = os.getenv("MLB_SOURCE_TIMEZONE", "America/New_York")


def sporting_day(now_utc: datetime | None = None, tz_name: str = SOURCE_TIMEZONE) -> date:
    """Return today's date as the source sees it.

    Falls back to the UTC calendar date when the zone cannot be loaded.
    """

    now = now_utc or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    try:
        tz = ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Time zone %s unavailable, falling back to UTC date", tz_name)
        return now.astimezone(timezone.utc).date()
    return now.astimezone(tz).date()


def previous_day(day: date) -> date:
    return day - timedelta(days=1)
