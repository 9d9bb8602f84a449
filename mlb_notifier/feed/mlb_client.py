"""MLB Stats API HTTP client for schedules, live feeds and the team list."""

from __future__ import annotations

import logging
import os
import threading
import time
from typing import Any

import requests

from mlb_notifier.feed.mlb_parser import parse_game_feed, parse_schedule, parse_teams
from mlb_notifier.feed.schema import LineScore, ScheduleGame, TeamSearchResult
from mlb_notifier.feed.teams import FALLBACK_TEAMS

logger = logging.getLogger(__name__)
MLB_API_BASE_URL = os.getenv("MLB_API_BASE_URL", "https://statsapi.mlb.com/api/v1").rstrip("/")
MLB_LIVE_FEED_BASE_URL = os.getenv(
    "MLB_LIVE_FEED_BASE_URL", "https://statsapi.mlb.com/api/v1.1"
).rstrip("/")
DEFAULT_TIMEOUT_SECONDS = float(os.getenv("MLB_API_TIMEOUT_SECONDS", "8"))
DEFAULT_USER_AGENT = "mlb-notifier/1.0 (+https://example.local)"
MLB_SPORT_ID = 1
TEAM_CACHE_TTL_SECONDS = 15 * 60
MAX_BODY_SNIPPET = 300


class MLBApiError(RuntimeError):
    pass


class MLBApiHttpError(MLBApiError):
    def __init__(self, status: int, status_text: str, url: str, body: str | None = None) -> None:
        super().__init__(f"MLB API error: {status} {status_text}")
        self.status = status
        self.status_text = status_text
        self.url = url
        self.body = body


def build_url(base: str, pathname: str) -> str:
    return f"{base.rstrip('/')}/{pathname.lstrip('/')}"


class MLBStatsClient:
    """Blocking client; callers on the event loop go through ``asyncio.to_thread``."""

    def __init__(
        self,
        base_url: str = MLB_API_BASE_URL,
        live_feed_base_url: str = MLB_LIVE_FEED_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.base_url = base_url
        self.live_feed_base_url = live_feed_base_url
        self.timeout = timeout
        self._team_cache: list[TeamSearchResult] | None = None
        self._last_team_fetch: float | None = None
        self._team_lock = threading.Lock()

    def _fetch_json(self, url: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        headers = {
            "User-Agent": DEFAULT_USER_AGENT,
            "Accept": "application/json",
        }
        try:
            response = requests.get(url, params=params, headers=headers, timeout=self.timeout)
        except requests.Timeout as exc:
            raise MLBApiError(f"MLB API request timed out after {self.timeout}s: {url}") from exc
        except requests.RequestException as exc:
            raise MLBApiError(f"MLB API request failed: {exc}") from exc

        if response.status_code < 200 or response.status_code >= 300:
            raise MLBApiHttpError(
                response.status_code,
                response.reason or "",
                response.url or url,
                (response.text or "")[:MAX_BODY_SNIPPET],
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise MLBApiError(f"MLB API returned invalid JSON: {url}") from exc
        if not isinstance(payload, dict):
            raise MLBApiError(f"MLB API returned unexpected payload type: {type(payload).__name__}")
        return payload

    def get_team_schedule(self, team_id: int, date_iso: str) -> list[ScheduleGame]:
        url = build_url(self.base_url, "schedule")
        params = {"sportId": MLB_SPORT_ID, "teamId": team_id, "date": date_iso}
        logger.debug("MLB schedule request team_id=%s date=%s", team_id, date_iso)
        try:
            payload = self._fetch_json(url, params)
        except MLBApiHttpError as exc:
            logger.warning(
                "Failed to fetch team schedule team_id=%s date=%s status=%s status_text=%s url=%s body=%s",
                team_id,
                date_iso,
                exc.status,
                exc.status_text,
                exc.url,
                exc.body,
            )
            raise
        except MLBApiError as exc:
            logger.warning(
                "Failed to fetch team schedule team_id=%s date=%s error=%s",
                team_id,
                date_iso,
                exc,
            )
            raise
        return parse_schedule(payload)

    def get_game_feed(self, game_pk: int) -> LineScore | None:
        """Return the current line score, or None when the feed has none yet.

        Transport failures raise ``MLBApiError``.
        """

        url = build_url(self.live_feed_base_url, f"game/{game_pk}/feed/live")
        try:
            payload = self._fetch_json(url)
        except MLBApiError as exc:
            logger.warning("Failed to fetch game feed game_pk=%s error=%s", game_pk, exc)
            raise
        return parse_game_feed(payload)

    def get_all_teams(self) -> list[TeamSearchResult]:
        with self._team_lock:
            now = time.monotonic()
            if (
                self._team_cache is not None
                and self._last_team_fetch is not None
                and now - self._last_team_fetch < TEAM_CACHE_TTL_SECONDS
            ):
                return self._team_cache

            try:
                payload = self._fetch_json(
                    build_url(self.base_url, "teams"), {"sportId": MLB_SPORT_ID}
                )
                teams = parse_teams(payload)
                if not teams:
                    raise MLBApiError("MLB API returned an empty team list")
            except MLBApiError as exc:
                if self._team_cache is not None:
                    logger.warning("Falling back to cached team list after failure: %s", exc)
                    return self._team_cache
                logger.error("Failed to fetch team list, using fallback data: %s", exc)
                self._team_cache = list(FALLBACK_TEAMS)
                self._last_team_fetch = now
                return self._team_cache

            self._team_cache = teams
            self._last_team_fetch = now
            return teams

    def search_teams(self, keyword: str) -> list[TeamSearchResult]:
        trimmed = (keyword or "").strip().lower()
        teams = self.get_all_teams()
        if not trimmed:
            return list(teams)
        return [
            team
            for team in teams
            if any(
                trimmed in text.lower()
                for text in (team.name, team.abbreviation, team.location_name)
                if text
            )
        ]
