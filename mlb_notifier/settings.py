from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from mlb_notifier.models import AppSettings, MonitoredTeam
from mlb_notifier.schemas import SettingsOut, SettingsUpdate, TeamSelection, TeamSelectionIn

logger = logging.getLogger(__name__)

DEFAULT_POLLING_INTERVAL_SEC = 30


@dataclass(frozen=True)
class SettingsSnapshot:
    teams: tuple[TeamSelection, ...]
    polling_interval_sec: int
    notifications_enabled: bool
    sound_enabled: bool

    def to_out(self) -> SettingsOut:
        return SettingsOut(
            teams=list(self.teams),
            polling_interval_sec=self.polling_interval_sec,
            notifications_enabled=self.notifications_enabled,
            sound_enabled=self.sound_enabled,
        )


def default_snapshot() -> SettingsSnapshot:
    return SettingsSnapshot(
        teams=(),
        polling_interval_sec=DEFAULT_POLLING_INTERVAL_SEC,
        notifications_enabled=True,
        sound_enabled=False,
    )


def _default_settings() -> AppSettings:
    return AppSettings(
        id=1,
        polling_interval_sec=DEFAULT_POLLING_INTERVAL_SEC,
        notifications_enabled=True,
        sound_enabled=False,
        updated_at_utc=datetime.now(timezone.utc),
    )


def get_or_create_settings(db) -> AppSettings:
    settings = db.query(AppSettings).filter(AppSettings.id == 1).one_or_none()
    if settings:
        return settings
    settings = _default_settings()
    db.add(settings)
    db.commit()
    db.refresh(settings)
    return settings


def list_teams(db) -> list[TeamSelection]:
    rows = db.query(MonitoredTeam).order_by(MonitoredTeam.added_at.asc(), MonitoredTeam.id.asc()).all()
    return [TeamSelection.model_validate(row) for row in rows]


def snapshot_settings(db) -> SettingsSnapshot:
    settings = get_or_create_settings(db)
    return SettingsSnapshot(
        teams=tuple(list_teams(db)),
        polling_interval_sec=settings.polling_interval_sec,
        notifications_enabled=settings.notifications_enabled,
        sound_enabled=settings.sound_enabled,
    )


def update_settings(db, update: SettingsUpdate) -> SettingsSnapshot:
    settings = get_or_create_settings(db)
    changes = update.model_dump(exclude_none=True)
    for field, value in changes.items():
        setattr(settings, field, value)
    settings.updated_at_utc = datetime.now(timezone.utc)
    db.commit()
    if changes:
        logger.info("Settings updated: %s", changes)
    return snapshot_settings(db)


def add_team(db, selection: TeamSelectionIn) -> SettingsSnapshot:
    existing = db.query(MonitoredTeam).filter(MonitoredTeam.team_id == selection.team_id).one_or_none()
    if existing is not None:
        return snapshot_settings(db)
    db.add(
        MonitoredTeam(
            team_id=selection.team_id,
            team_name=selection.team_name,
            abbreviation=selection.abbreviation,
            added_at=datetime.now(timezone.utc),
        )
    )
    db.commit()
    logger.info("Added team team_id=%s name=%s", selection.team_id, selection.team_name)
    return snapshot_settings(db)


def remove_team(db, team_id: int) -> SettingsSnapshot:
    removed = db.query(MonitoredTeam).filter(MonitoredTeam.team_id == team_id).delete()
    db.commit()
    if removed:
        logger.info("Removed team team_id=%s", team_id)
    return snapshot_settings(db)
