from sqlalchemy import Boolean, Column, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.sql import func
from .db import Base


class AppSettings(Base):
    __tablename__ = "app_settings"

    id = Column(Integer, primary_key=True)
    polling_interval_sec = Column(Integer, nullable=False, default=30)
    notifications_enabled = Column(Boolean, nullable=False, default=True)
    sound_enabled = Column(Boolean, nullable=False, default=False)
    updated_at_utc = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )


class MonitoredTeam(Base):
    __tablename__ = "monitored_teams"
    __table_args__ = (
        UniqueConstraint("team_id", name="uq_monitored_teams_team_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    team_id = Column(Integer, nullable=False)
    team_name = Column(String, nullable=False, default="")
    abbreviation = Column(String, nullable=False, default="")
    # Selections are immutable; removal deletes the row.
    added_at = Column(DateTime(timezone=True), nullable=False)
