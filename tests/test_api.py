from __future__ import annotations

import os
import tempfile
import time
import unittest
from datetime import datetime, timezone
from unittest.mock import patch

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from mlb_notifier import main
from mlb_notifier.db import get_db
from mlb_notifier.monitor.watcher import GameWatcher
from mlb_notifier.schemas import GameStatus, NotificationEntry
from mlb_notifier.settings import default_snapshot

YANKEES = {"team_id": 147, "team_name": "New York Yankees", "abbreviation": "NYY"}
RED_SOX = {"team_id": 111, "team_name": "Boston Red Sox", "abbreviation": "BOS"}
NOW = datetime(2026, 7, 4, 18, 0, tzinfo=timezone.utc)


class _OfflineClient:
    """Stands in for the MLB client: every schedule is empty."""

    def __init__(self) -> None:
        self.schedule_calls: list[tuple[int, str]] = []

    def get_team_schedule(self, team_id: int, date_iso: str):
        self.schedule_calls.append((team_id, date_iso))
        return []

    def get_game_feed(self, game_pk: int):
        return None


class ApiTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        db_path = os.path.join(self._tmp.name, "api.db")
        self.engine = create_engine(f"sqlite:///{db_path}", connect_args={"check_same_thread": False})
        session_factory = sessionmaker(bind=self.engine, autocommit=False, autoflush=False)

        def _get_test_db():
            db = session_factory()
            try:
                yield db
            finally:
                db.close()

        self.feed = _OfflineClient()
        self.watcher = GameWatcher(self.feed, main.event_bus)
        patches = [
            patch("mlb_notifier.main.engine", self.engine),
            patch("mlb_notifier.main.SessionLocal", session_factory),
            patch("mlb_notifier.main.game_watcher", self.watcher),
            patch("mlb_notifier.main._active_settings", default_snapshot()),
        ]
        for p in patches:
            p.start()
            self.addCleanup(p.stop)
        main.app.dependency_overrides[get_db] = _get_test_db
        self.addCleanup(main.app.dependency_overrides.clear)

        self.client = TestClient(main.app)
        self.client.__enter__()

    def tearDown(self) -> None:
        self.client.__exit__(None, None, None)
        self.engine.dispose()
        self._tmp.cleanup()

    def _wait_for_status(self, team_id: int, timeout: float = 2.0) -> list[dict]:
        deadline = time.monotonic() + timeout
        while True:
            body = self.client.get("/api/watcher/status", params={"team_id": team_id}).json()
            if body:
                return body
            if time.monotonic() > deadline:
                raise AssertionError("no status published in time")
            time.sleep(0.01)


class SettingsEndpointTests(ApiTestCase):
    def test_defaults_and_partial_update_restart_the_watcher(self) -> None:
        self.client.post("/api/teams", json=YANKEES)

        response = self.client.put("/api/settings", json={"polling_interval_sec": 45})

        self.assertEqual(200, response.status_code)
        self.assertEqual(45, response.json()["polling_interval_sec"])
        self.assertTrue(response.json()["notifications_enabled"])
        self.assertEqual("running", self.watcher.state)
        self.assertEqual(45, self.watcher.interval_seconds)
        self.assertEqual(45, main.active_settings().polling_interval_sec)

    def test_polling_interval_below_one_is_rejected(self) -> None:
        response = self.client.put("/api/settings", json={"polling_interval_sec": 0})

        self.assertEqual(422, response.status_code)
        self.assertEqual(30, self.client.get("/api/settings").json()["polling_interval_sec"])

    def test_notifier_reads_cached_settings_without_a_session(self) -> None:
        self.client.put("/api/settings", json={"notifications_enabled": False})
        entry = NotificationEntry(
            team_id=147,
            team_name="New York Yankees",
            title="New York Yankees scored!",
            body="Updated score: NYY 1 - 0 BOS",
            timestamp=NOW,
            game_pk=1,
        )

        with patch("mlb_notifier.main.SessionLocal", side_effect=AssertionError("session opened")):
            with self.assertLogs("mlb_notifier.notifier", level="INFO") as logs:
                main.notifier.show(entry)

        self.assertIn("Notifications disabled", logs.output[0])


class TeamEndpointTests(ApiTestCase):
    def test_adding_team_starts_watcher_and_publishes_status(self) -> None:
        response = self.client.post("/api/teams", json=YANKEES)

        self.assertEqual(200, response.status_code)
        self.assertEqual([147], [team["team_id"] for team in response.json()["teams"]])
        self.assertEqual("running", self.watcher.state)
        self.assertEqual((147,), tuple(t.team_id for t in main.active_settings().teams))

        [status] = self._wait_for_status(147)
        self.assertEqual("idle", status["state"])
        self.assertEqual("No active game today", status["message"])

    def test_adding_same_team_twice_keeps_one_row(self) -> None:
        self.client.post("/api/teams", json=YANKEES)
        self.client.post("/api/teams", json=RED_SOX)
        self.client.post("/api/teams", json=YANKEES)

        teams = self.client.get("/api/teams").json()

        self.assertEqual([147, 111], [team["team_id"] for team in teams])

    def test_removing_a_team_restarts_and_last_removal_goes_idle(self) -> None:
        self.client.post("/api/teams", json=YANKEES)
        self.client.post("/api/teams", json=RED_SOX)

        response = self.client.delete("/api/teams/147")
        self.assertEqual([111], [team["team_id"] for team in response.json()["teams"]])
        self.assertEqual("running", self.watcher.state)
        self.assertEqual((111,), tuple(t.team_id for t in self.watcher.teams))

        response = self.client.delete("/api/teams/111")
        self.assertEqual([], response.json()["teams"])
        self.assertEqual("idle", self.watcher.state)


class WatcherEndpointTests(ApiTestCase):
    def test_start_without_teams_reports_idle_with_settings(self) -> None:
        body = self.client.post("/api/watcher/start").json()

        self.assertEqual("idle", body["state"])
        self.assertEqual([], body["settings"]["teams"])
        self.assertEqual(30, body["settings"]["polling_interval_sec"])

    def test_start_then_stop_payloads(self) -> None:
        self.client.post("/api/teams", json=YANKEES)
        self.client.post("/api/watcher/stop")

        body = self.client.post("/api/watcher/start").json()
        self.assertEqual("running", body["state"])
        self.assertEqual([147], [team["team_id"] for team in body["settings"]["teams"]])
        self._wait_for_status(147)

        body = self.client.post("/api/watcher/stop").json()
        self.assertEqual({"state": "idle", "settings": None}, body)
        self.assertEqual([], self.client.get("/api/watcher/status").json())

    def test_notifications_are_served_newest_first(self) -> None:
        for n in (1, 2):
            self.watcher.notifications.add(
                NotificationEntry(
                    team_id=147,
                    team_name="New York Yankees",
                    title="New York Yankees scored!",
                    body=f"#{n}",
                    timestamp=NOW,
                    game_pk=n,
                )
            )

        body = self.client.get("/api/notifications").json()

        self.assertEqual(["#2", "#1"], [entry["body"] for entry in body])


class EventStreamTests(unittest.IsolatedAsyncioTestCase):
    async def test_stream_relays_status_and_unsubscribes_on_close(self) -> None:
        status_before = main.event_bus.status.listener_count
        notification_before = main.event_bus.notification.listener_count

        response = await main.api_events()
        stream = response.body_iterator

        hello = await stream.__anext__()
        self.assertTrue(hello.startswith("event: hello"))
        self.assertEqual(status_before + 1, main.event_bus.status.listener_count)
        self.assertEqual(notification_before + 1, main.event_bus.notification.listener_count)

        main.event_bus.status.publish(
            GameStatus(team_id=147, team_name="New York Yankees", state="idle", last_updated=NOW)
        )
        chunk = await stream.__anext__()
        self.assertTrue(chunk.startswith("event: status"))
        self.assertIn('"team_id":147', chunk)

        await stream.aclose()

        self.assertEqual(status_before, main.event_bus.status.listener_count)
        self.assertEqual(notification_before, main.event_bus.notification.listener_count)


if __name__ == "__main__":
    unittest.main()
