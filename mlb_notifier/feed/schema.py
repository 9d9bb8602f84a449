"""Internal data contract for MLB Stats API records."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

ABSTRACT_STATE_PREVIEW = "Preview"
ABSTRACT_STATE_PRE_GAME = "Pre-Game"
ABSTRACT_STATE_LIVE = "Live"
ABSTRACT_STATE_FINAL = "Final"


class TeamInfo(BaseModel):
    id: int
    name: str
    abbreviation: str = ""


class ScheduleGame(BaseModel):
    """
    One game from the team schedule endpoint, fetched fresh every tick.
    """

    game_pk: int
    start_time: Optional[datetime] = None
    detailed_state: str = ""
    abstract_state: str
    home_team: TeamInfo
    away_team: TeamInfo


class TeamScore(BaseModel):
    team: TeamInfo
    runs: Optional[int] = None
    hits: Optional[int] = None
    errors: Optional[int] = None


class LineScore(BaseModel):
    home: TeamScore
    away: TeamScore
    inning: Optional[int] = None
    inning_state: Optional[str] = None


class TeamSearchResult(BaseModel):
    id: int
    name: str
    abbreviation: str
    location_name: Optional[str] = None
    venue_name: Optional[str] = None
