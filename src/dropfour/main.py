from __future__ import annotations

import argparse
import logging
from contextlib import ExitStack
from pathlib import Path

from dropfour import config
from dropfour.config import SearchSettings
from dropfour.core.board import Board
from dropfour.game.controller import run_game
from dropfour.game.state import GameSession
from dropfour.parallel.group import BACKENDS, WorkerGroup
from dropfour.parallel.master import ParallelAgent
from dropfour.reports.turn_log import TurnLog, default_path

log = logging.getLogger(__name__)


def build_argparser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="dropfour",
        description="Play Connect-4 against a CPU that spreads its search over worker processes.",
    )
    ap.add_argument("--workers", type=int, default=0, help="Number of evaluator workers (0 = search in this process)")
    ap.add_argument("--backend", choices=BACKENDS, default="process", help="Run workers as processes or threads")
    ap.add_argument("--depth", type=int, default=config.SEARCH_DEPTH, help="Search depth in plies, counting the CPU move")
    ap.add_argument("--rows", type=int, default=config.ROWS, help="Board height")
    ap.add_argument("--cols", type=int, default=config.COLS, help="Board width")

    ap.add_argument("--task-timeout", type=float, default=config.TASK_TIMEOUT_SEC,
                    help="Seconds before an unanswered task is handed to another worker")
    ap.add_argument("--poll-interval", type=float, default=config.POLL_INTERVAL_SEC,
                    help="Seconds the coordinator waits for a message before checking on workers")
    ap.add_argument("--max-attempts", type=int, default=config.MAX_TASK_ATTEMPTS,
                    help="Hand-outs of one task before the coordinator evaluates it itself")

    ap.add_argument("--turn-log", type=str, default=None,
                    help="CSV file for per-turn scores. A directory gets a timestamped turns_*.csv")
    ap.add_argument("--plain", action="store_true", help="Print the board as plain symbols, no colors")
    ap.add_argument("--log-level", type=str, default="WARNING", help="Logging level (DEBUG, INFO, WARNING, ...)")
    return ap


def main(argv: list[str] | None = None) -> int:
    ap = build_argparser()
    args = ap.parse_args(argv)

    level = getattr(logging, args.log_level.upper(), None)
    if not isinstance(level, int):
        ap.error(f"unknown log level: {args.log_level}")
    logging.basicConfig(level=level, format=config.LOG_FORMAT)

    if args.workers < 0:
        ap.error("--workers must be >= 0")
    if args.depth < 1:
        ap.error("--depth must be >= 1")
    if args.rows < 1 or args.cols < 1:
        ap.error("--rows and --cols must be >= 1")
    if args.task_timeout <= 0 or args.poll_interval <= 0:
        ap.error("--task-timeout and --poll-interval must be > 0")
    if args.plain:
        config.USE_COLOR = False

    settings = SearchSettings(
        depth=args.depth,
        task_timeout_sec=args.task_timeout,
        poll_interval_sec=args.poll_interval,
        max_task_attempts=max(1, args.max_attempts),
    )
    session = GameSession(board=Board(args.rows, args.cols))

    with ExitStack() as stack:
        group = None
        if args.workers > 0:
            group = stack.enter_context(
                WorkerGroup(args.workers, settings.task_depth, backend=args.backend, log_level=level)
            )

        turn_log = None
        if args.turn_log:
            path = Path(args.turn_log)
            if path.is_dir():
                path = default_path(path)
            turn_log = stack.enter_context(TurnLog(path, args.cols))
            log.info("writing turn log to %s", path)

        agent = ParallelAgent(group, settings)
        try:
            run_game(agent, plain=args.plain, turn_log=turn_log, session=session)
        except (KeyboardInterrupt, EOFError):
            print("\nGame quit.")
            return 130

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
