"""
DANCESCORE - Command line entry point.

Replays a recorded performance against a level and prints the
session summary as JSON.

Usage:
    python -m dancescore.main score --level level.json --session session.json
    python -m dancescore.main calibrate --level level.json --session session.json --events 1500,4900

Author: DANCESCORE Team
Version: 1.0.0
"""

import argparse
import logging
import logging.config
import os
import sys
from typing import List, Optional

from pydantic import ValidationError

from .core.config import settings
from .helpers.exception_handler import DanceScoreException
from .modules.pose_source import RecordedPoseSource
from .schemas.sche_pose import load_level_file
from .services.srv_scoring import ScoringService
from .utils.logger import create_session_logger

logger = logging.getLogger(__name__)


def setup_logging() -> None:
    if os.path.exists(settings.LOGGING_CONFIG_FILE):
        logging.config.fileConfig(settings.LOGGING_CONFIG_FILE, disable_existing_loggers=False)
    else:
        logging.basicConfig(level=logging.INFO)


def parse_events(value: str) -> List[float]:
    try:
        return [float(part) for part in value.split(",") if part.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"events must be comma separated numbers, got {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=f"{settings.PROJECT_NAME} - pose scoring")
    subparsers = parser.add_subparsers(dest="command", required=True)

    score = subparsers.add_parser("score", help="Score a recorded session against a level")
    score.add_argument("--level", type=str, required=True)
    score.add_argument("--session", type=str, required=True)
    score.add_argument("--calibration-ms", type=float, default=0.0)
    score.add_argument("--session-id", type=str, default=None)
    score.add_argument("--log-dir", type=str, default=None, help="Save a JSON session log here")

    calibrate = subparsers.add_parser("calibrate", help="Estimate reaction delay from cue times")
    calibrate.add_argument("--level", type=str, required=True)
    calibrate.add_argument("--session", type=str, required=True)
    calibrate.add_argument("--events", type=parse_events, required=True, help="Cue times in ms, e.g. 1500,4900")
    calibrate.add_argument("--threshold", type=float, default=settings.CALIBRATION_SCORE_THRESHOLD)
    calibrate.add_argument("--window-ms", type=float, default=settings.CALIBRATION_MAX_WINDOW_MS)
    calibrate.add_argument("--log-dir", type=str, default=None)
    return parser


def run(args: argparse.Namespace) -> str:
    level = load_level_file(args.level)
    source = RecordedPoseSource.from_file(args.session)

    session_logger = None
    if args.log_dir:
        session_logger = create_session_logger(getattr(args, "session_id", None) or "cli", args.log_dir)

    if args.command == "score":
        service = ScoringService.from_level(
            level,
            calibration_offset_ms=args.calibration_ms,
            session_logger=session_logger,
            session_id=args.session_id,
        )
        summary = service.run(source)
    else:
        service = ScoringService.from_level(level, session_logger=session_logger)
        service.run(source)
        estimate = service.calibrate(args.events, threshold=args.threshold, max_window_ms=args.window_ms)
        summary = service.summarize(calibration=estimate)

    if session_logger is not None:
        path = session_logger.save_session_log()
        logger.info(f"Session log saved: {path}")
    return summary.model_dump_json(indent=2)


def main(argv: Optional[List[str]] = None) -> int:
    setup_logging()
    args = build_parser().parse_args(argv)
    try:
        print(run(args))
    except (OSError, ValidationError, DanceScoreException) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
