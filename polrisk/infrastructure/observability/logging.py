"""Structured JSON logging for archive and update runs"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def __init__(self, *args: Any, service_name: str = "polrisk", **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.service_name = service_name

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = self.service_name


def setup_logging(level: str = "INFO", fmt: str = "json", service_name: str = "polrisk") -> None:
    """Configure structured JSON logging (or plain text with fmt='text')"""
    logger = logging.getLogger()
    logger.setLevel(level.upper())

    # Remove existing handlers
    logger.handlers.clear()

    # Logs go to stderr; stdout carries operator prompts and the change-log draft
    handler = logging.StreamHandler(sys.stderr)
    if fmt == "text":
        formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
    else:
        formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s", service_name=service_name)
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_archive_run(
    archive_date: str,
    snapshot_created: bool,
    record_appended: bool,
    category_changes: int,
    overall_change: Optional[float],
) -> None:
    """Log structured archive outcome for auditing"""
    logging.getLogger("polrisk.archive").info(
        "Archive run completed",
        extra={
            "step": "archive_complete",
            "archive_date": archive_date,
            "snapshot_outcome": "created" if snapshot_created else "skipped",
            "record_appended": record_appended,
            "category_changes": category_changes,
            "overall_change": overall_change,
        },
    )
