"""Leaderboard entrypoint.

Prints the leaderboard, one user's statistics, or one question's summary
from a SQLite store or an exported JSON snapshot.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from typing import List, Optional, Sequence

from dotenv import load_dotenv

from econcast.config import Settings, load_settings, sanitize_dict
from econcast.shared.logging import setup_logging

logger = logging.getLogger("econcast.entrypoints.leaderboard")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="econcast-leaderboard",
        description="Print the forecasting leaderboard",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--db", type=str, default=None, help="SQLite database path")
    source.add_argument("--snapshot", type=str, default=None, help="JSON snapshot file")
    parser.add_argument("--user", type=str, default=None, help="Print one user's statistics")
    parser.add_argument("--question", type=str, default=None, help="Print one question's summary")
    parser.add_argument("--config", type=str, default=None, help="YAML settings file")
    parser.add_argument(
        "--unscored-last",
        action="store_true",
        help="Rank users without resolved answers after scored users",
    )
    return parser


def format_leaderboard(entries: Sequence) -> str:
    lines = [f"{'Rank':>4}  {'Forecaster':<24}  {'Brier':>6}  {'Answered':>8}  {'Accuracy':>8}"]
    for entry in entries:
        stats = entry.stats
        lines.append(
            f"{entry.rank:>4}  {entry.user.display_name[:24]:<24}  "
            f"{stats.brier_score:>6.3f}  {stats.questions_answered:>8d}  "
            f"{stats.accuracy:>7.1f}%"
        )
    return "\n".join(lines)


def format_user_stats(user_id: str, stats) -> str:
    return "\n".join([
        f"User:               {user_id}",
        f"Brier score:        {stats.brier_score:.3f}",
        f"Questions answered: {stats.questions_answered}",
        f"Questions scored:   {stats.questions_scored}",
        f"Accuracy:           {stats.accuracy:.1f}%",
    ])


def format_question_summary(summary) -> str:
    top = "-" if summary.top_user_id is None else f"{summary.top_user_id} ({summary.top_score:.3f})"
    return "\n".join([
        f"Question:    {summary.question_id}",
        f"Forecasters: {summary.total}",
        f"Correct:     {summary.correct}",
        f"Incorrect:   {summary.incorrect}",
        f"Top:         {top}",
    ])


def _build_service(args: argparse.Namespace, settings: Settings):
    from econcast.data import (
        DatabaseSnapshotSource,
        DatabaseSubmissionSink,
        JsonSnapshotSource,
        ReadOnlySubmissionSink,
    )
    from econcast.database import DBM
    from econcast.service import ForecastingService

    if args.snapshot:
        service = ForecastingService(
            JsonSnapshotSource(args.snapshot),
            ReadOnlySubmissionSink(),
            settings.scoring,
        )
        return service, None

    dbm = DBM(settings.database, path=args.db)
    service = ForecastingService(
        DatabaseSnapshotSource(dbm, persist_auto_resolve=False),
        DatabaseSubmissionSink(dbm),
        settings.scoring,
    )
    return service, dbm


async def run(args: argparse.Namespace, settings: Settings) -> int:
    service, dbm = _build_service(args, settings)
    try:
        snapshot = await service.refresh()
        if args.question:
            summary = service.question_summary(args.question)
            if summary is None:
                print(f"unknown question: {args.question}", file=sys.stderr)
                return 2
            print(format_question_summary(summary))
        elif args.user:
            print(format_user_stats(args.user, service.user_stats(args.user)))
        else:
            print(format_leaderboard(service.leaderboard()))
        return 1 if snapshot.degraded and not snapshot.questions else 0
    finally:
        if dbm is not None:
            await dbm.dispose()


def main(argv: Optional[List[str]] = None) -> int:
    if os.environ.get("ECONCAST_TEST_MODE", "").lower() not in ("true", "1", "yes"):
        load_dotenv()

    args = build_parser().parse_args(argv)
    settings = load_settings(args.config)
    if args.unscored_last:
        scoring = settings.scoring.model_copy(
            update={"leaderboard": settings.scoring.leaderboard.model_copy(update={"unscored_last": True})}
        )
        settings = settings.model_copy(update={"scoring": scoring})

    setup_logging(
        level=settings.logging.level,
        log_dir=settings.logging.log_dir,
        json_logs=settings.logging.json_logs,
    )
    logger.debug({"settings": sanitize_dict(settings.model_dump(mode="json"))})

    return asyncio.run(run(args, settings))


if __name__ == "__main__":
    sys.exit(main())
