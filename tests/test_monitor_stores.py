from __future__ import annotations

import unittest
from datetime import date, datetime, timedelta, timezone

from mlb_notifier.feed.schema import LineScore, ScheduleGame, TeamInfo, TeamScore
from mlb_notifier.monitor.cache import ChangeCache
from mlb_notifier.monitor.dates import sporting_day
from mlb_notifier.monitor.events import EventBus
from mlb_notifier.monitor.scoring import classify_games, has_score_changed
from mlb_notifier.monitor.stores import NotificationLog, StatusStore
from mlb_notifier.schemas import GameStatus, NotificationEntry

NOW = datetime(2026, 7, 4, 18, 0, tzinfo=timezone.utc)
NYY = TeamInfo(id=147, name="New York Yankees", abbreviation="NYY")
BOS = TeamInfo(id=111, name="Boston Red Sox", abbreviation="BOS")


def _line(home_runs, away_runs) -> LineScore:
    return LineScore(home=TeamScore(team=NYY, runs=home_runs), away=TeamScore(team=BOS, runs=away_runs))


def _status(team_id: int, name: str, state: str = "idle") -> GameStatus:
    return GameStatus(team_id=team_id, team_name=name, state=state, last_updated=NOW)


def _notification(n: int) -> NotificationEntry:
    return NotificationEntry(
        team_id=147, team_name="New York Yankees", title="scored", body=f"#{n}", timestamp=NOW, game_pk=n
    )


class ChangeCacheTests(unittest.TestCase):
    def test_upsert_is_idempotent_per_team_and_game(self) -> None:
        cache = ChangeCache()
        cache.upsert(147, 1, "New York Yankees", _line(0, 0))
        cache.upsert(147, 1, "New York Yankees", _line(1, 0))

        self.assertEqual(1, len(cache))
        self.assertEqual(1, cache.get(147, 1).last_line_score.home.runs)

    def test_same_game_is_tracked_per_team(self) -> None:
        cache = ChangeCache()
        cache.upsert(147, 1, "New York Yankees", _line(0, 0))
        cache.upsert(111, 1, "Boston Red Sox", _line(0, 0))

        self.assertEqual(2, len(cache))

    def test_evict_team_removes_only_that_team(self) -> None:
        cache = ChangeCache()
        cache.upsert(147, 1, "New York Yankees", _line(0, 0))
        cache.upsert(147, 2, "New York Yankees", _line(0, 0))
        cache.upsert(111, 1, "Boston Red Sox", _line(0, 0))

        self.assertEqual(2, cache.evict_team(147))
        self.assertEqual([], cache.entries(147))
        self.assertIsNotNone(cache.get(111, 1))
        self.assertEqual(0, cache.evict_team(147))

    def test_doubleheader_first_tracked_game_wins(self) -> None:
        cache = ChangeCache()
        cache.upsert(147, 1, "New York Yankees", _line(2, 0))
        cache.upsert(147, 2, "New York Yankees", _line(5, 0))
        cache.upsert(147, 1, "New York Yankees", _line(3, 0))

        self.assertEqual(3, cache.any_line_score_for_team(147).home.runs)
        self.assertIsNone(cache.any_line_score_for_team(111))


class StatusStoreTests(unittest.TestCase):
    def test_one_status_per_team_sorted_by_name(self) -> None:
        store = StatusStore()
        store.set(_status(147, "New York Yankees"))
        store.set(_status(111, "Boston Red Sox"))
        store.set(_status(147, "New York Yankees", "live"))

        self.assertEqual(2, len(store))
        self.assertEqual(["Boston Red Sox", "New York Yankees"], [s.team_name for s in store.all()])
        self.assertEqual("live", store.for_team(147)[0].state)
        self.assertEqual([], store.for_team(1))


class NotificationLogTests(unittest.TestCase):
    def test_capacity_fifty_newest_first(self) -> None:
        log = NotificationLog()
        for n in range(60):
            log.add(_notification(n))

        entries = log.entries()
        self.assertEqual(50, len(entries))
        self.assertEqual("#59", entries[0].body)
        self.assertEqual("#10", entries[-1].body)


class EventBusTests(unittest.TestCase):
    def test_failing_listener_does_not_block_others(self) -> None:
        bus = EventBus()
        received = []

        def _broken(_payload):
            raise RuntimeError("listener bug")

        bus.status.subscribe(_broken)
        bus.status.subscribe(received.append)

        with self.assertLogs("mlb_notifier.monitor.events", level="ERROR"):
            bus.status.publish(_status(147, "New York Yankees"))

        self.assertEqual(1, len(received))

    def test_unsubscribe_and_channels_by_name(self) -> None:
        bus = EventBus()
        received = []
        unsubscribe = bus.subscribe("notification", received.append)

        bus.notification.publish(_notification(1))
        unsubscribe()
        bus.notification.publish(_notification(2))

        self.assertEqual(["#1"], [entry.body for entry in received])
        self.assertEqual(0, bus.notification.listener_count)
        with self.assertRaises(ValueError):
            bus.subscribe("scores", received.append)


class SportingDayTests(unittest.TestCase):
    def test_evening_game_in_utc_next_day_stays_on_source_day(self) -> None:
        late_utc = datetime(2026, 7, 5, 2, 30, tzinfo=timezone.utc)

        self.assertEqual(date(2026, 7, 4), sporting_day(late_utc, "America/New_York"))

    def test_unknown_zone_falls_back_to_utc_date(self) -> None:
        late_utc = datetime(2026, 7, 5, 2, 30, tzinfo=timezone.utc)

        with self.assertLogs("mlb_notifier.monitor.dates", level="WARNING"):
            day = sporting_day(late_utc, "Mars/Olympus_Mons")

        self.assertEqual(date(2026, 7, 5), day)

    def test_naive_datetime_is_treated_as_utc(self) -> None:
        naive = datetime(2026, 7, 5, 2, 30) + timedelta(hours=10)

        self.assertEqual(date(2026, 7, 5), sporting_day(naive, "America/New_York"))


class ScoringTests(unittest.TestCase):
    def test_classify_games_by_abstract_state(self) -> None:
        games = [
            ScheduleGame(game_pk=pk, abstract_state=state, home_team=NYY, away_team=BOS)
            for pk, state in [(1, "Live"), (2, "Preview"), (3, "Pre-Game"), (4, "Final"), (5, "Other")]
        ]

        schedule = classify_games(games)

        self.assertEqual([1], [g.game_pk for g in schedule.live])
        self.assertEqual([2, 3], [g.game_pk for g in schedule.upcoming])
        self.assertEqual([4], [g.game_pk for g in schedule.final])
        self.assertEqual("scheduled", schedule.idle_state())

    def test_score_change_uses_monitored_side_only(self) -> None:
        self.assertFalse(has_score_changed(_line(1, 0), _line(1, 5), 147))
        self.assertTrue(has_score_changed(_line(1, 0), _line(1, 5), 111))
        self.assertTrue(has_score_changed(None, _line(0, 0), 147))
        self.assertFalse(has_score_changed(_line(None, 0), _line(0, 0), 147))


if __name__ == "__main__":
    unittest.main()
