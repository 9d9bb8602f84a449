"""Last observed line score per (team, game), used to detect score changes."""

from __future__ import annotations

from dataclasses import dataclass

from mlb_notifier.feed.schema import LineScore

CacheKey = tuple[int, int]


@dataclass
class CacheEntry:
    team_id: int
    game_pk: int
    team_name: str
    last_line_score: LineScore | None

    @property
    def key(self) -> CacheKey:
        return (self.team_id, self.game_pk)


class ChangeCache:
    def __init__(self) -> None:
        self._entries: dict[CacheKey, CacheEntry] = {}

    def get(self, team_id: int, game_pk: int) -> CacheEntry | None:
        return self._entries.get((team_id, game_pk))

    def upsert(self, team_id: int, game_pk: int, team_name: str, line_score: LineScore | None) -> CacheEntry:
        entry = self._entries.get((team_id, game_pk))
        if entry is None:
            entry = CacheEntry(team_id, game_pk, team_name, line_score)
            self._entries[entry.key] = entry
        else:
            entry.team_name = team_name
            entry.last_line_score = line_score
        return entry

    def evict_team(self, team_id: int) -> int:
        stale = [key for key in self._entries if key[0] == team_id]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def any_line_score_for_team(self, team_id: int) -> LineScore | None:
        """Return a cached line score for the team, or None.

        Entries are scanned in insertion order, so on a doubleheader day the
        first tracked game wins.
        """
        for entry in self._entries.values():
            if entry.team_id == team_id and entry.last_line_score is not None:
                return entry.last_line_score
        return None

    def entries(self, team_id: int | None = None) -> list[CacheEntry]:
        return [
            entry
            for entry in self._entries.values()
            if team_id is None or entry.team_id == team_id
        ]

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
