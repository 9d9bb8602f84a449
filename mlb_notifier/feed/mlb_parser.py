"""Parser for MLB Stats API payloads."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from mlb_notifier.feed.schema import (
    LineScore,
    ScheduleGame,
    TeamInfo,
    TeamScore,
    TeamSearchResult,
)

logger = logging.getLogger(__name__)


def _safe_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _parse_start_time(value: Any) -> datetime | None:
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            pass
    return None


def _parse_team(raw: Any) -> TeamInfo | None:
    if not isinstance(raw, dict):
        return None
    team_id = _safe_int(raw.get("id"))
    if team_id is None:
        return None
    return TeamInfo(
        id=team_id,
        name=str(raw.get("name") or ""),
        abbreviation=str(raw.get("abbreviation") or ""),
    )


def _side_team(game: dict[str, Any], side: str) -> TeamInfo | None:
    teams = game.get("teams") or {}
    side_obj = teams.get(side) if isinstance(teams, dict) else None
    if not isinstance(side_obj, dict):
        return None
    return _parse_team(side_obj.get("team"))


def _parse_schedule_game(game: dict[str, Any]) -> ScheduleGame | None:
    game_pk = _safe_int(game.get("gamePk"))
    status = game.get("status") if isinstance(game.get("status"), dict) else {}
    abstract_state = status.get("abstractGameState")
    home = _side_team(game, "home")
    away = _side_team(game, "away")
    if game_pk is None or not isinstance(abstract_state, str) or home is None or away is None:
        return None
    return ScheduleGame(
        game_pk=game_pk,
        start_time=_parse_start_time(game.get("gameDate")),
        detailed_state=str(status.get("detailedState") or ""),
        abstract_state=abstract_state,
        home_team=home,
        away_team=away,
    )


def parse_schedule(payload: dict[str, Any]) -> list[ScheduleGame]:
    """Flatten ``dates[].games[]`` into schedule records.

    Games missing an id, a state or either team are skipped.
    """

    games: list[ScheduleGame] = []
    for day in payload.get("dates") or []:
        if not isinstance(day, dict):
            continue
        for raw_game in day.get("games") or []:
            if not isinstance(raw_game, dict):
                continue
            parsed = _parse_schedule_game(raw_game)
            if parsed is None:
                logger.warning("Skipping malformed schedule game gamePk=%s", raw_game.get("gamePk"))
                continue
            games.append(parsed)
    return games


def _parse_team_score(team: TeamInfo, raw: Any) -> TeamScore:
    scores = raw if isinstance(raw, dict) else {}
    return TeamScore(
        team=team,
        runs=_safe_int(scores.get("runs")),
        hits=_safe_int(scores.get("hits")),
        errors=_safe_int(scores.get("errors")),
    )


def parse_game_feed(payload: dict[str, Any]) -> LineScore | None:
    """Extract the line score from a live game feed.

    Returns None while the feed has no line score (or no team data) yet.
    """

    live_data = payload.get("liveData") or {}
    linescore = live_data.get("linescore") if isinstance(live_data, dict) else None
    if not isinstance(linescore, dict):
        return None

    game_data = payload.get("gameData") or {}
    teams = game_data.get("teams") if isinstance(game_data, dict) else None
    if not isinstance(teams, dict):
        return None
    home = _parse_team(teams.get("home"))
    away = _parse_team(teams.get("away"))
    if home is None or away is None:
        return None

    score_teams = linescore.get("teams") or {}
    inning_state = linescore.get("inningState")
    return LineScore(
        home=_parse_team_score(home, score_teams.get("home")),
        away=_parse_team_score(away, score_teams.get("away")),
        inning=_safe_int(linescore.get("currentInning")),
        inning_state=inning_state if isinstance(inning_state, str) else None,
    )


def parse_teams(payload: dict[str, Any]) -> list[TeamSearchResult]:
    results: list[TeamSearchResult] = []
    for raw in payload.get("teams") or []:
        if not isinstance(raw, dict):
            continue
        team_id = _safe_int(raw.get("id"))
        if team_id is None:
            continue
        venue = raw.get("venue") if isinstance(raw.get("venue"), dict) else {}
        results.append(
            TeamSearchResult(
                id=team_id,
                name=str(raw.get("name") or ""),
                abbreviation=str(raw.get("abbreviation") or ""),
                location_name=raw.get("locationName"),
                venue_name=venue.get("name"),
            )
        )
    return results
