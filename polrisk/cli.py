"""
Command-line entry point.

USAGE:
    polrisk update                   interactive edit of data/current.json
    polrisk archive [--as-of DATE]   monthly snapshot + change-log draft
    polrisk check                    validate every data file
    polrisk show                     print the current aggregates
"""

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import List, Optional

from polrisk.config import Settings, settings as default_settings
from polrisk.domain.exceptions import DomainException
from polrisk.infrastructure.observability.logging import setup_logging
from polrisk.infrastructure.observability.metrics import export_metrics
from polrisk.infrastructure.storage.repositories import (
    CategoryMetadataRepository,
    ChangeLogRepository,
    CurrentAssessmentStore,
    HistoryArchive,
)
from polrisk.infrastructure.storage.schemas import ChangeRecordDocument
from polrisk.services.archive import run_monthly_archive
from polrisk.services.prompts import ConsolePrompter
from polrisk.services.update_session import SessionState, UpdateSession

logger = logging.getLogger("polrisk.cli")


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="polrisk",
        description="Maintain the political-risk assessment and its monthly history",
    )
    parser.add_argument("--data-dir", type=Path, default=None, help="Directory holding the data files")
    parser.add_argument("--log-level", default=None, help="Logging level (default from POLRISK_LOG_LEVEL)")

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("update", help="Interactively edit category scores and findings")

    archive = subparsers.add_parser("archive", help="Archive this month's snapshot and draft a change record")
    archive.add_argument(
        "--as-of",
        type=date.fromisoformat,
        default=None,
        metavar="YYYY-MM-DD",
        help="Run as if today were this date (the snapshot is still pinned to the archive day)",
    )

    subparsers.add_parser("check", help="Validate current, history, change log and category metadata")
    subparsers.add_parser("show", help="Print the current overall, domain scores and risk level")
    return parser


def cmd_update(config: Settings) -> int:
    store = CurrentAssessmentStore(config.current_path)
    result = UpdateSession(store, ConsolePrompter()).run()
    if result.state == SessionState.SAVED:
        print("\nNext steps:")
        print(f"  1. Review changes: git diff {config.current_path}")
        print("  2. Rebuild the dashboard")
    return 0


def cmd_archive(config: Settings, as_of: Optional[date]) -> int:
    result = run_monthly_archive(
        CurrentAssessmentStore(config.current_path),
        HistoryArchive(config.history_path),
        ChangeLogRepository(config.changes_path),
        today=as_of,
        archive_day=config.archive_day,
    )

    print(f"Archive for {result.period} ({result.archive_date.isoformat()})")
    print(f"  snapshot: {'created' if result.snapshot_created else 'already existed, skipped'}")
    print(f"  change log: {'draft appended' if result.record_appended else 'entry already present'}")
    print("\n--- Change record draft ---")
    print(json.dumps(ChangeRecordDocument.from_domain(result.record).to_json_dict(), indent=2))
    print(f'\nReplace every "UPDATE:" placeholder in {config.changes_path} before publishing.')
    return 0


def cmd_check(config: Settings) -> int:
    current = CurrentAssessmentStore(config.current_path).load()
    print(f"[OK] {config.current_path} ({current.assessment_date.isoformat()})")

    snapshots = HistoryArchive(config.history_path).snapshots()
    print(f"[OK] {config.history_path}: {len(snapshots)} snapshots")

    records = ChangeLogRepository(config.changes_path).records()
    print(f"[OK] {config.changes_path}: {len(records)} change records")

    metadata = CategoryMetadataRepository(config.categories_path)
    if metadata.exists():
        print(f"[OK] {config.categories_path}: {len(metadata.load())} categories")
    else:
        print(f"[SKIP] {config.categories_path} not found")
    return 0


def cmd_show(config: Settings) -> int:
    current = CurrentAssessmentStore(config.current_path).load()
    print(f"Assessment date: {current.assessment_date.isoformat()} ({current.assessment_period})")
    print(f"Overall score:   {current.overall_score} ({current.risk_level})")
    for domain_id, score in current.domain_scores.items():
        print(f"  {domain_id}: {score}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = create_parser().parse_args(argv)

    overrides = {}
    if args.data_dir is not None:
        overrides["data_dir"] = args.data_dir
    if args.log_level is not None:
        overrides["log_level"] = args.log_level
    config = default_settings.model_copy(update=overrides) if overrides else default_settings

    setup_logging(config.log_level, config.log_format, config.service_name)

    try:
        if args.command == "update":
            code = cmd_update(config)
        elif args.command == "archive":
            code = cmd_archive(config, args.as_of)
        elif args.command == "check":
            code = cmd_check(config)
        else:
            code = cmd_show(config)
    except DomainException as e:
        logger.error(f"{type(e).__name__}: {e}", extra={"step": args.command})
        print(f"error: {e}", file=sys.stderr)
        return 1
    except (KeyboardInterrupt, EOFError):
        print("\nAborted, nothing saved.", file=sys.stderr)
        return 130

    if config.metrics_textfile is not None:
        export_metrics(config.metrics_textfile)
    return code


if __name__ == "__main__":
    sys.exit(main())
