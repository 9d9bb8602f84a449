"""In-memory circular buffer log handler for the ``/api/logs`` activity feed."""

from __future__ import annotations

import logging
from collections import deque
from datetime import datetime, timezone
from dataclasses import dataclass, asdict


@dataclass(frozen=True)
class LogEntry:
    timestamp: str
    level: str
    logger: str
    message: str
    team_id: int | None = None
    game_pk: int | None = None


class BufferHandler(logging.Handler):
    """Keeps the last *maxlen* records emitted by the monitor and the API."""

    def __init__(self, maxlen: int = 200) -> None:
        super().__init__()
        self._buffer: deque[LogEntry] = deque(maxlen=maxlen)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self._buffer.append(
                LogEntry(
                    timestamp=datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
                    level=record.levelname,
                    logger=record.name,
                    message=self.format(record),
                    team_id=getattr(record, "team_id", None),
                    game_pk=getattr(record, "game_pk", None),
                )
            )
        except Exception:
            self.handleError(record)

    def entries(self, limit: int = 100, team_id: int | None = None) -> list[dict]:
        """Newest first, optionally only records tagged with *team_id*."""
        items = list(self._buffer)
        if team_id is not None:
            items = [e for e in items if e.team_id == team_id]
        items = items[-limit:] if limit > 0 else []
        items.reverse()
        return [asdict(e) for e in items]


_handler: BufferHandler | None = None


def get_buffer_handler() -> BufferHandler:
    global _handler
    if _handler is None:
        _handler = BufferHandler(maxlen=200)
        _handler.setFormatter(logging.Formatter("%(message)s"))
        _handler.setLevel(logging.INFO)
    return _handler


def install_buffer_handler() -> BufferHandler:
    """Attach the buffer handler to the package root logger."""
    handler = get_buffer_handler()
    lg = logging.getLogger("mlb_notifier")
    if handler not in lg.handlers:
        lg.addHandler(handler)
    if lg.level == logging.NOTSET or lg.level > logging.INFO:
        lg.setLevel(logging.INFO)
    return handler
