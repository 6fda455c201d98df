"""Command-line entry point: build a preset scenario and report on it."""

from __future__ import annotations

import argparse
from datetime import datetime, timezone
import logging
from typing import List, Optional

from .config import SCENARIO_SEED
from .errors import ConfigurationError
from .leaderboard import ScenarioMetrics, leaderboard_frame, segment_summary_frame
from .scenario import PRESETS, ScenarioResult
from .utils import format_time, json_dumps_sorted


def _setup_logging(verbose: bool = False) -> None:
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.INFO,
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )


def _parse_start_time(value: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid ISO timestamp: {value!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Generate a reproducible synthetic scenario in memory."
    )
    parser.add_argument(
        "--preset",
        choices=sorted(PRESETS),
        default="leaderboard",
        help="Scenario preset to build (default: leaderboard).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=SCENARIO_SEED,
        help=f"Random seed (default: {SCENARIO_SEED}).",
    )
    parser.add_argument(
        "--users",
        type=int,
        help="Override the preset's user count.",
    )
    parser.add_argument(
        "--start-time",
        type=_parse_start_time,
        help="ISO timestamp of the first activity (default: now, UTC).",
    )
    parser.add_argument(
        "--top",
        type=int,
        default=5,
        help="Leaderboard rows to log per segment (default: 5).",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the summary metrics as JSON on stdout.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    return parser.parse_args(argv)


def _log_result(result: ScenarioResult, top: int) -> None:
    metrics = ScenarioMetrics.from_result(result)
    logging.info(
        "Scenario: %d users, %d activities, %d segments (%d categorized), %d efforts",
        metrics.users,
        metrics.activities,
        metrics.segments,
        metrics.categorized_segments,
        metrics.efforts,
    )
    if metrics.fastest_seconds is not None:
        logging.info(
            "Effort times: fastest=%s median=%s slowest=%s",
            format_time(metrics.fastest_seconds),
            format_time(metrics.median_seconds or 0.0),
            format_time(metrics.slowest_seconds or 0.0),
        )

    summary = segment_summary_frame(result)
    if not summary.empty:
        logging.info("Segments:\n%s", summary.to_string(index=False))

    if top <= 0:
        return
    for segment in result.segments:
        board = leaderboard_frame(result, segment.id)
        if board.empty:
            logging.info("Segment %r has no efforts", segment.name)
            continue
        logging.info(
            "Top %d on %r:\n%s",
            top,
            segment.name,
            board.head(top).to_string(index=False),
        )


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    _setup_logging(args.verbose)

    try:
        builder = PRESETS[args.preset]().with_seed(args.seed)
        if args.users is not None:
            builder.with_users(args.users)
        if args.start_time is not None:
            builder.with_start_time(args.start_time)
        result = builder.build_data()
    except ConfigurationError as exc:
        logging.error("Invalid scenario configuration: %s", exc)
        return 2

    _log_result(result, args.top)
    if args.json:
        print(json_dumps_sorted(ScenarioMetrics.from_result(result).to_dict()))
    return 0


__all__ = ["main"]
