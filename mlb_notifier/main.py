from __future__ import annotations

import asyncio
import json
import logging

from fastapi import Depends, FastAPI
from sqlalchemy.orm import Session
from starlette.responses import StreamingResponse

from mlb_notifier.db import Base, SessionLocal, engine, get_db
from mlb_notifier.feed.mlb_client import MLBStatsClient
from mlb_notifier.feed.schema import TeamSearchResult
from mlb_notifier.log_buffer import get_buffer_handler, install_buffer_handler
from mlb_notifier.monitor.events import EventBus
from mlb_notifier.monitor.watcher import GameWatcher
from mlb_notifier.notifier import Notifier
from mlb_notifier.schemas import (
    GameStatus,
    NotificationEntry,
    SettingsOut,
    SettingsUpdate,
    TeamSelection,
    TeamSelectionIn,
    WatcherStateOut,
)
from mlb_notifier.settings import (
    SettingsSnapshot,
    add_team,
    default_snapshot,
    list_teams,
    remove_team,
    snapshot_settings,
    update_settings,
)

app = FastAPI(title="MLB Score Notifier")
logger = logging.getLogger(__name__)

KEEPALIVE_SEC = 15
EVENT_QUEUE_SIZE = 100

mlb_client = MLBStatsClient()
event_bus = EventBus()
game_watcher = GameWatcher(mlb_client, event_bus)


# Last snapshot handed to the watcher; read by the notifier on the event loop.
_active_settings: SettingsSnapshot = default_snapshot()


def active_settings() -> SettingsSnapshot:
    return _active_settings


def _apply_settings(settings: SettingsSnapshot) -> None:
    global _active_settings
    _active_settings = settings
    game_watcher.start(settings)


def _load_settings() -> SettingsSnapshot:
    with SessionLocal() as db:
        return snapshot_settings(db)


notifier = Notifier(active_settings)
event_bus.notification.subscribe(notifier.show)


@app.on_event("startup")
async def start_watcher() -> None:
    install_buffer_handler()
    logger.info("App starting up, initializing game watcher")
    Base.metadata.create_all(bind=engine)
    settings = await asyncio.to_thread(_load_settings)
    _apply_settings(settings)


@app.on_event("shutdown")
async def stop_watcher() -> None:
    await game_watcher.shutdown()


@app.get("/api/settings", response_model=SettingsOut)
def api_get_settings(db: Session = Depends(get_db)):
    return snapshot_settings(db).to_out()


@app.put("/api/settings", response_model=SettingsOut)
async def api_update_settings(update: SettingsUpdate, db: Session = Depends(get_db)):
    updated = update_settings(db, update)
    _apply_settings(updated)
    return updated.to_out()


@app.get("/api/teams", response_model=list[TeamSelection])
def api_list_teams(db: Session = Depends(get_db)):
    return list_teams(db)


@app.post("/api/teams", response_model=SettingsOut)
async def api_add_team(selection: TeamSelectionIn, db: Session = Depends(get_db)):
    updated = add_team(db, selection)
    _apply_settings(updated)
    return updated.to_out()


@app.get("/api/teams/search", response_model=list[TeamSearchResult])
def api_search_teams(q: str = ""):
    return mlb_client.search_teams(q)


@app.delete("/api/teams/{team_id}", response_model=SettingsOut)
async def api_remove_team(team_id: int, db: Session = Depends(get_db)):
    updated = remove_team(db, team_id)
    _apply_settings(updated)
    return updated.to_out()


@app.post("/api/watcher/start", response_model=WatcherStateOut)
async def api_watcher_start(db: Session = Depends(get_db)):
    settings = snapshot_settings(db)
    _apply_settings(settings)
    return WatcherStateOut(state=game_watcher.state, settings=settings.to_out())


@app.post("/api/watcher/stop", response_model=WatcherStateOut)
async def api_watcher_stop():
    game_watcher.stop()
    return WatcherStateOut(state=game_watcher.state)


@app.get("/api/watcher/status", response_model=list[GameStatus])
async def api_watcher_status(team_id: int | None = None):
    return game_watcher.get_status(team_id)


@app.get("/api/notifications", response_model=list[NotificationEntry])
async def api_notifications():
    return game_watcher.get_notifications()


@app.get("/api/events")
async def api_events():
    queue: asyncio.Queue[tuple[str, str]] = asyncio.Queue(maxsize=EVENT_QUEUE_SIZE)

    def _relay(name: str):
        def _push(payload) -> None:
            try:
                queue.put_nowait((name, payload.model_dump_json()))
            except asyncio.QueueFull:
                logger.warning("SSE client too slow, dropping %s event", name)

        return _push

    unsubscribers = [
        event_bus.status.subscribe(_relay("status")),
        event_bus.notification.subscribe(_relay("notification")),
    ]

    async def gen():
        try:
            yield f"event: hello\ndata: {json.dumps({'state': game_watcher.state})}\n\n"
            while True:
                try:
                    name, data = await asyncio.wait_for(queue.get(), timeout=KEEPALIVE_SEC)
                except asyncio.TimeoutError:
                    yield ":keepalive\n\n"
                    continue
                yield f"event: {name}\ndata: {data}\n\n"
        finally:
            for unsubscribe in unsubscribers:
                unsubscribe()

    return StreamingResponse(
        gen(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache, no-transform",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


@app.get("/api/logs")
def api_logs(limit: int = 100, team_id: int | None = None):
    handler = get_buffer_handler()
    return {"entries": handler.entries(limit=limit, team_id=team_id)}
