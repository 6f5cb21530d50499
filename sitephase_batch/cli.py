"""
sitephase command line.

Usage:
  sitephase run-phases [--today YYYY-MM-DD]
  sitephase sync-draws PROJECT_ID
  sitephase metrics PROJECT_ID [--today YYYY-MM-DD]

Global options:
  --config PATH     settings YAML overlaid on the packaged defaults
  --database-url    overrides the configured database URL

Each command runs inside one transaction and prints a JSON result on
stdout.  Exit status is 0 on success, 1 when the candidate projects could
not be listed, the requested project does not exist or its draws could not
be loaded, 2 on bad arguments or configuration.
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace
from datetime import date
from typing import Sequence
from uuid import UUID

from sitephase_batch.orchestrator import SitePhaseOrchestrator
from sitephase_config import get_settings
from sitephase_kernel.db.engine import init_engine_from_url, session_scope
from sitephase_kernel.db.immutability import register_immutability_listeners
from sitephase_kernel.domain.clock import SystemClock
from sitephase_kernel.exceptions import (
    ConfigurationError,
    ProjectEnumerationError,
    ProjectNotFoundError,
)
from sitephase_kernel.logging_config import configure_logging, get_logger

logger = get_logger("cli")


def _parse_day(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a YYYY-MM-DD date: {value!r}") from None


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a project id: {value!r}") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sitephase",
        description="Schedule-driven phase and draw reconciliation.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--config", default=None, help="Settings YAML file")
    parser.add_argument("--database-url", default=None, help="SQLAlchemy database URL")

    sub = parser.add_subparsers(dest="command", required=True)

    phases = sub.add_parser("run-phases", help="Advance project phases")
    phases.add_argument("--today", type=_parse_day, default=None)

    draws = sub.add_parser("sync-draws", help="Recompute draw due dates for a project")
    draws.add_argument("project_id", type=_parse_uuid)

    metrics = sub.add_parser("metrics", help="Print progress and payment metrics")
    metrics.add_argument("project_id", type=_parse_uuid)
    metrics.add_argument("--today", type=_parse_day, default=None)

    return parser


def _emit(payload: dict) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True))


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings(args.config)
    except ConfigurationError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2
    if args.database_url:
        settings = replace(settings, database_url=args.database_url)

    configure_logging(level=settings.log_level)
    init_engine_from_url(settings.database_url)
    register_immutability_listeners()

    clock = SystemClock()
    try:
        with session_scope() as session:
            orchestrator = SitePhaseOrchestrator.from_session(
                session, settings=settings, clock=clock,
            )
            if args.command == "run-phases":
                _emit(orchestrator.run_phase_progression(args.today).to_dict())
            elif args.command == "sync-draws":
                report = orchestrator.synchronize_draw_due_dates(args.project_id)
                _emit(report.to_dict())
                if report.error is not None:
                    # project missing or its schedule unreadable; nothing was written
                    print(f"ERROR: {report.error}", file=sys.stderr)
                    return 1
            else:
                _emit(orchestrator.project_metrics(args.project_id, args.today).to_dict())
    except ProjectEnumerationError as exc:
        logger.error("cli_command_failed", extra={"command": args.command}, exc_info=True)
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    except ProjectNotFoundError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
