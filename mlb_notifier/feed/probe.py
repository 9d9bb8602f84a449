"""Quick probe for one team's MLB schedule on a given date."""

from __future__ import annotations

import argparse
import logging
from datetime import datetime

from mlb_notifier.feed.mlb_client import MLBApiError, MLBStatsClient
from mlb_notifier.monitor.dates import sporting_day


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Probe the MLB schedule for a team/date and print each game's state.",
    )
    parser.add_argument(
        "--team-id",
        type=int,
        required=True,
        help="MLB team id (e.g., 147 for the Yankees).",
    )
    parser.add_argument(
        "--date",
        type=str,
        default="today",
        help="Date in YYYY-MM-DD format (default: today in the source time zone).",
    )
    parser.add_argument(
        "--feed",
        action="store_true",
        help="Also fetch the live line score of each game.",
    )
    return parser.parse_args()


def _resolve_date(raw: str) -> str:
    cleaned = raw.strip().lower()
    if cleaned == "today":
        return sporting_day().isoformat()
    try:
        return datetime.strptime(raw, "%Y-%m-%d").date().isoformat()
    except ValueError as exc:
        raise SystemExit("date must be YYYY-MM-DD or 'today'") from exc


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    args = _parse_args()
    target_date = _resolve_date(args.date)
    client = MLBStatsClient()

    try:
        games = client.get_team_schedule(args.team_id, target_date)
    except MLBApiError as exc:
        logging.error("MLB API error: %s", exc)
        raise SystemExit(1)

    logging.info("Fetched %s games for team_id=%s date=%s", len(games), args.team_id, target_date)
    for game in games:
        logging.info(
            "  %s  %s @ %s  [%s / %s]",
            game.game_pk,
            game.away_team.name,
            game.home_team.name,
            game.abstract_state,
            game.detailed_state,
        )
        if not args.feed:
            continue
        try:
            line_score = client.get_game_feed(game.game_pk)
        except MLBApiError as exc:
            logging.error("    feed error: %s", exc)
            continue
        if line_score is None:
            logging.info("    no line score yet")
            continue
        logging.info(
            "    %s %s - %s %s (inning %s %s)",
            line_score.away.team.abbreviation,
            line_score.away.runs,
            line_score.home.runs,
            line_score.home.team.abbreviation,
            line_score.inning,
            line_score.inning_state or "",
        )


if __name__ == "__main__":
    main()
