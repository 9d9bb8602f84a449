"""In-memory status table and bounded notification ring."""

from __future__ import annotations

from collections import deque

from mlb_notifier.schemas import GameStatus, NotificationEntry

NOTIFICATION_LOG_CAPACITY = 50


class StatusStore:
    """Holds the most recently emitted status per team."""

    def __init__(self) -> None:
        self._by_team: dict[int, GameStatus] = {}

    def set(self, status: GameStatus) -> None:
        self._by_team[status.team_id] = status

    def get(self, team_id: int) -> GameStatus | None:
        return self._by_team.get(team_id)

    def all(self) -> list[GameStatus]:
        return sorted(self._by_team.values(), key=lambda status: status.team_name)

    def for_team(self, team_id: int) -> list[GameStatus]:
        status = self._by_team.get(team_id)
        return [status] if status is not None else []

    def clear(self) -> None:
        self._by_team.clear()

    def __len__(self) -> int:
        return len(self._by_team)


class NotificationLog:
    """Stores the last *capacity* notifications, newest first."""

    def __init__(self, capacity: int = NOTIFICATION_LOG_CAPACITY) -> None:
        self._entries: deque[NotificationEntry] = deque(maxlen=capacity)

    def add(self, entry: NotificationEntry) -> None:
        self._entries.appendleft(entry)

    def entries(self) -> list[NotificationEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
