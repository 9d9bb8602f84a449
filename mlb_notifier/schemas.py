from datetime import datetime
from pydantic import BaseModel, Field
from typing import Literal, Optional

from mlb_notifier.feed.schema import LineScore

GameState = Literal["idle", "scheduled", "live", "final", "error"]


class TeamSelection(BaseModel):
    team_id: int = Field(ge=0)
    team_name: str
    abbreviation: str = ""
    added_at: datetime

    class Config:
        from_attributes = True
        frozen = True


class TeamSelectionIn(BaseModel):
    team_id: int = Field(ge=0)
    team_name: str = Field(min_length=1)
    abbreviation: str = ""


class GameStatus(BaseModel):
    team_id: int
    team_name: str
    state: GameState
    last_updated: datetime
    line_score: Optional[LineScore] = None
    message: Optional[str] = None


class NotificationEntry(BaseModel):
    team_id: int
    team_name: str
    title: str
    body: str
    timestamp: datetime
    game_pk: int


class SettingsOut(BaseModel):
    teams: list[TeamSelection]
    polling_interval_sec: int
    notifications_enabled: bool
    sound_enabled: bool


class SettingsUpdate(BaseModel):
    polling_interval_sec: Optional[int] = Field(default=None, ge=1)
    notifications_enabled: Optional[bool] = None
    sound_enabled: Optional[bool] = None


class WatcherStateOut(BaseModel):
    state: Literal["idle", "running"]
    settings: Optional[SettingsOut] = None
