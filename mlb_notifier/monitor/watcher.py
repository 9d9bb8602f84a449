"""
Game Status Monitor.

Polls the schedule for every monitored team on a fixed cadence, keeps the
last observed line score per (team, game) and publishes a ``status`` event
per team per tick plus a ``notification`` event whenever a monitored team's
own run total changes between two observations of the same live game.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime, timezone
from typing import Any, Callable, Literal

from mlb_notifier.feed.mlb_client import DEFAULT_TIMEOUT_SECONDS, MLBApiHttpError, MLBStatsClient
from mlb_notifier.feed.schema import LineScore, ScheduleGame
from mlb_notifier.monitor.cache import ChangeCache
from mlb_notifier.monitor.dates import previous_day, sporting_day
from mlb_notifier.monitor.events import EventBus
from mlb_notifier.monitor.scoring import (
    build_notification,
    classify_games,
    has_score_changed,
    opponent_name,
)
from mlb_notifier.monitor.stores import NotificationLog, StatusStore
from mlb_notifier.schemas import GameState, GameStatus, NotificationEntry, TeamSelection

logger = logging.getLogger(__name__)

TEAM_CONCURRENCY = 2
MIN_POLL_INTERVAL_SECONDS = 10
SCHEDULE_ERROR_MESSAGE = "Failed to load schedule"
NO_GAME_MESSAGE = "No active game today"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GameWatcher:
    def __init__(
        self,
        client: MLBStatsClient | None = None,
        bus: EventBus | None = None,
        *,
        concurrency: int = TEAM_CONCURRENCY,
        fetch_timeout: float = DEFAULT_TIMEOUT_SECONDS,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        self.client = client or MLBStatsClient()
        self.bus = bus or EventBus()
        self.concurrency = concurrency
        self.fetch_timeout = fetch_timeout
        self.clock = clock
        self.cache = ChangeCache()
        self.statuses = StatusStore()
        self.notifications = NotificationLog()
        self.state: Literal["idle", "running"] = "idle"
        self.teams: tuple[TeamSelection, ...] = ()
        self.interval_seconds: int | None = None
        self._generation = 0
        self._task: asyncio.Task | None = None
        self._stop_event: asyncio.Event | None = None
        self._tick_lock = asyncio.Lock()

    # ── lifecycle ────────────────────────────────────────────

    def start(self, settings: Any) -> None:
        """Restart polling for ``settings.teams``; must run inside the event loop."""
        logger.info("Starting game watcher")
        self.stop()
        self.teams = tuple(settings.teams)

        if not self.teams:
            logger.info("No teams configured for monitoring")
            return

        self.interval_seconds = max(int(settings.polling_interval_sec), MIN_POLL_INTERVAL_SECONDS)
        self._stop_event = asyncio.Event()
        self._task = asyncio.get_running_loop().create_task(
            self._run(self._generation, self.interval_seconds, self._stop_event)
        )
        self.state = "running"
        logger.info(
            "Watcher running: teams=%s interval=%ss",
            ",".join(team.abbreviation or str(team.team_id) for team in self.teams),
            self.interval_seconds,
        )

    def stop(self) -> None:
        # Any tick still in flight belongs to an older generation from here on.
        self._generation += 1
        if self._stop_event is not None:
            self._stop_event.set()
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        self._stop_event = None
        self.cache.clear()
        self.statuses.clear()
        if self.state != "idle":
            logger.info("Game watcher stopped")
        self.state = "idle"

    async def shutdown(self) -> None:
        task = self._task
        self.stop()
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)

    async def _run(self, generation: int, interval: int, stop_event: asyncio.Event) -> None:
        while not stop_event.is_set():
            await self._tick(generation)
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=interval)
            except asyncio.TimeoutError:
                continue

    # ── accessors ────────────────────────────────────────────

    def get_status(self, team_id: int | None = None) -> list[GameStatus]:
        if team_id is None:
            return self.statuses.all()
        return self.statuses.for_team(team_id)

    def get_notifications(self) -> list[NotificationEntry]:
        return self.notifications.entries()

    # ── tick ─────────────────────────────────────────────────

    async def tick(self) -> None:
        await self._tick(self._generation)

    async def _tick(self, generation: int) -> None:
        async with self._tick_lock:
            if generation != self._generation:
                return
            logger.debug("Watcher tick generation=%d", generation)
            try:
                day = sporting_day(self.clock())
                queue: asyncio.Queue[TeamSelection] = asyncio.Queue()
                for team in self.teams:
                    queue.put_nowait(team)
                workers = [
                    asyncio.create_task(self._drain(queue, day, generation))
                    for _ in range(min(self.concurrency, queue.qsize()))
                ]
                await asyncio.gather(*workers)
            except Exception:
                logger.exception("Watcher tick failed")

    async def _drain(self, queue: asyncio.Queue, day: date, generation: int) -> None:
        while True:
            try:
                team = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            await self._process_team(team, day, generation)

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    async def _call(self, func: Callable, *args: Any) -> Any:
        return await asyncio.wait_for(asyncio.to_thread(func, *args), timeout=self.fetch_timeout)

    # ── per team ─────────────────────────────────────────────

    async def _schedule_or_empty(self, team_id: int, day: date) -> list[ScheduleGame]:
        try:
            return await self._call(self.client.get_team_schedule, team_id, day.isoformat())
        except MLBApiHttpError as exc:
            if exc.status == 404:
                logger.info(
                    "No schedule for team_id=%s date=%s (404)", team_id, day, extra={"team_id": team_id}
                )
                return []
            raise

    async def _fetch_schedule(self, team_id: int, day: date) -> list[ScheduleGame]:
        games = await self._schedule_or_empty(team_id, day)
        if games:
            return games
        # Games that started the previous evening may still be live.
        fallback = previous_day(day)
        logger.debug("No games for team_id=%s on %s, retrying %s", team_id, day, fallback)
        return await self._schedule_or_empty(team_id, fallback)

    async def _process_team(self, team: TeamSelection, day: date, generation: int) -> None:
        try:
            games = await self._fetch_schedule(team.team_id, day)
            schedule = classify_games(games)

            if not schedule.live:
                if not self._is_current(generation):
                    return
                previous_line_score = self.cache.any_line_score_for_team(team.team_id)
                evicted = self.cache.evict_team(team.team_id)
                if evicted:
                    logger.info(
                        "Cleared %d cached game(s) for team_id=%s",
                        evicted,
                        team.team_id,
                        extra={"team_id": team.team_id},
                    )
                if schedule.upcoming:
                    message = f"Next game vs {opponent_name(schedule.upcoming[0], team.team_id)}"
                else:
                    message = NO_GAME_MESSAGE
                self._emit_status(
                    team,
                    schedule.idle_state(),
                    line_score=previous_line_score,
                    message=message,
                )
                return

            for game in schedule.live:
                await self._process_live_game(team, game.game_pk, generation)
        except Exception as exc:
            logger.error(
                "Failed to process team schedule team_id=%s team=%s: %s: %s",
                team.team_id,
                team.team_name,
                type(exc).__name__,
                str(exc).strip() or "(no message)",
                exc_info=True,
                extra={"team_id": team.team_id},
            )
            if self._is_current(generation):
                self._emit_status(team, "error", message=SCHEDULE_ERROR_MESSAGE)

    # ── per game ─────────────────────────────────────────────

    async def _process_live_game(self, team: TeamSelection, game_pk: int, generation: int) -> None:
        line_score: LineScore | None = await self._call(self.client.get_game_feed, game_pk)
        if line_score is None:
            logger.debug(
                "No line score yet game_pk=%s", game_pk, extra={"team_id": team.team_id, "game_pk": game_pk}
            )
            return
        if not self._is_current(generation):
            return

        entry = self.cache.get(team.team_id, game_pk)
        if entry is None:
            self.cache.upsert(team.team_id, game_pk, team.team_name, line_score)
            logger.info(
                "Tracking live game game_pk=%s team_id=%s",
                game_pk,
                team.team_id,
                extra={"team_id": team.team_id, "game_pk": game_pk},
            )
            self._emit_status(team, "live", line_score=line_score)
            return

        if has_score_changed(entry.last_line_score, line_score, team.team_id):
            notification = build_notification(
                team.team_id, team.team_name, game_pk, line_score, self.clock()
            )
            self.notifications.add(notification)
            logger.info(
                "Score change game_pk=%s: %s",
                game_pk,
                notification.body,
                extra={"team_id": team.team_id, "game_pk": game_pk},
            )
            self.bus.notification.publish(notification)

        self.cache.upsert(team.team_id, game_pk, team.team_name, line_score)
        self._emit_status(team, "live", line_score=line_score)

    def _emit_status(
        self,
        team: TeamSelection,
        state: GameState,
        *,
        line_score: LineScore | None = None,
        message: str | None = None,
    ) -> None:
        status = GameStatus(
            team_id=team.team_id,
            team_name=team.team_name,
            state=state,
            last_updated=self.clock(),
            line_score=line_score,
            message=message,
        )
        self.statuses.set(status)
        self.bus.status.publish(status)
