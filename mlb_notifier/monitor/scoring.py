from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from mlb_notifier.feed.schema import (
    ABSTRACT_STATE_FINAL,
    ABSTRACT_STATE_LIVE,
    ABSTRACT_STATE_PRE_GAME,
    ABSTRACT_STATE_PREVIEW,
    LineScore,
    ScheduleGame,
    TeamScore,
)
from mlb_notifier.schemas import GameState, NotificationEntry

_UPCOMING_STATES = {ABSTRACT_STATE_PREVIEW, ABSTRACT_STATE_PRE_GAME}


@dataclass
class DaySchedule:
    live: list[ScheduleGame] = field(default_factory=list)
    upcoming: list[ScheduleGame] = field(default_factory=list)
    final: list[ScheduleGame] = field(default_factory=list)

    def idle_state(self) -> GameState:
        if self.upcoming:
            return "scheduled"
        if self.final:
            return "final"
        return "idle"


def classify_games(games: list[ScheduleGame]) -> DaySchedule:
    schedule = DaySchedule()
    for game in games:
        if game.abstract_state == ABSTRACT_STATE_LIVE:
            schedule.live.append(game)
        elif game.abstract_state in _UPCOMING_STATES:
            schedule.upcoming.append(game)
        elif game.abstract_state == ABSTRACT_STATE_FINAL:
            schedule.final.append(game)
    return schedule


def opponent_name(game: ScheduleGame, team_id: int) -> str:
    if game.away_team.id == team_id:
        return game.home_team.name
    return game.away_team.name


def own_side(line_score: LineScore, team_id: int) -> TeamScore:
    if line_score.home.team.id == team_id:
        return line_score.home
    return line_score.away


def team_runs(line_score: LineScore, team_id: int) -> int:
    # Partial upstream data may omit runs.
    return own_side(line_score, team_id).runs or 0


def has_score_changed(previous: LineScore | None, current: LineScore, team_id: int) -> bool:
    if previous is None:
        return True
    return team_runs(previous, team_id) != team_runs(current, team_id)


def build_notification(
    team_id: int,
    team_name: str,
    game_pk: int,
    line_score: LineScore,
    now: datetime,
) -> NotificationEntry:
    home = line_score.home
    away = line_score.away
    return NotificationEntry(
        team_id=team_id,
        team_name=team_name,
        title=f"{team_name} scored!",
        body=(
            f"Updated score: {home.team.abbreviation} {home.runs or 0}"
            f" - {away.runs or 0} {away.team.abbreviation}"
        ),
        timestamp=now,
        game_pk=game_pk,
    )
