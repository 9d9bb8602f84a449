"""CLI entrypoint for headless monitoring without the HTTP API."""

from __future__ import annotations

import argparse
import asyncio
import logging
from datetime import datetime, timezone

from mlb_notifier.feed.mlb_client import MLBStatsClient
from mlb_notifier.monitor.events import EventBus
from mlb_notifier.monitor.watcher import GameWatcher
from mlb_notifier.notifier import Notifier
from mlb_notifier.schemas import GameStatus, TeamSelection
from mlb_notifier.settings import DEFAULT_POLLING_INTERVAL_SEC, SettingsSnapshot


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Watch MLB teams and print a line whenever one of them scores.",
    )
    parser.add_argument(
        "--teams",
        type=str,
        required=True,
        help="Comma-separated team ids or abbreviations (e.g., 147,BOS).",
    )
    parser.add_argument(
        "--interval",
        type=int,
        default=DEFAULT_POLLING_INTERVAL_SEC,
        help="Polling interval in seconds (minimum 10).",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Do not display notifications, only log status changes.",
    )
    return parser.parse_args()


def _resolve_teams(raw: str, client: MLBStatsClient) -> list[TeamSelection]:
    tokens = [token.strip() for token in raw.split(",") if token.strip()]
    if not tokens:
        raise SystemExit("No teams provided. Use --teams 147,BOS,...")

    known = client.get_all_teams()
    by_id = {team.id: team for team in known}
    by_abbrev = {team.abbreviation.upper(): team for team in known}
    now = datetime.now(timezone.utc)
    selections: list[TeamSelection] = []
    invalid: list[str] = []
    for token in tokens:
        team = by_id.get(int(token)) if token.isdigit() else by_abbrev.get(token.upper())
        if team is None:
            invalid.append(token)
            continue
        selections.append(
            TeamSelection(
                team_id=team.id,
                team_name=team.name,
                abbreviation=team.abbreviation,
                added_at=now,
            )
        )
    if invalid:
        raise SystemExit(f"Unknown teams: {', '.join(invalid)}")
    return selections


def _log_status(status: GameStatus) -> None:
    line_score = status.line_score
    score = ""
    if line_score is not None:
        score = (
            f" {line_score.away.team.abbreviation} {line_score.away.runs or 0}"
            f" @ {line_score.home.team.abbreviation} {line_score.home.runs or 0}"
        )
    logging.info("%s: %s%s %s", status.team_name, status.state, score, status.message or "")


async def _watch(settings: SettingsSnapshot, client: MLBStatsClient) -> None:
    bus = EventBus()
    watcher = GameWatcher(client, bus)
    bus.status.subscribe(_log_status)
    bus.notification.subscribe(Notifier(lambda: settings).show)
    watcher.start(settings)
    try:
        await asyncio.Event().wait()
    finally:
        await watcher.shutdown()


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    args = _parse_args()
    if args.interval < 1:
        raise SystemExit("--interval must be >= 1 second.")
    client = MLBStatsClient()
    teams = _resolve_teams(args.teams, client)
    settings = SettingsSnapshot(
        teams=tuple(teams),
        polling_interval_sec=args.interval,
        notifications_enabled=not args.quiet,
        sound_enabled=False,
    )

    logging.info("Starting watcher teams=%s", ",".join(team.abbreviation for team in teams))
    try:
        asyncio.run(_watch(settings, client))
    except KeyboardInterrupt:
        logging.info("Watcher interrupted.")


if __name__ == "__main__":
    main()
