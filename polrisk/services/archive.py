"""Monthly archive run: snapshot the current assessment and draft its change record"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from polrisk.domain.changelog import generate_template
from polrisk.domain.exceptions import StaleAggregatesError
from polrisk.domain.models import ChangeRecord
from polrisk.infrastructure.observability.logging import log_archive_run
from polrisk.infrastructure.observability.metrics import record_archive
from polrisk.infrastructure.storage.repositories import (
    ChangeLogRepository,
    CurrentAssessmentStore,
    HistoryArchive,
)
from polrisk.utils.date_utils import archive_date_for, period_label

logger = logging.getLogger(__name__)


@dataclass
class ArchiveRunResult:
    """What one archive run did"""

    archive_date: date
    period: str
    snapshot_created: bool
    record_appended: bool
    record: ChangeRecord


def run_monthly_archive(
    store: CurrentAssessmentStore,
    history: HistoryArchive,
    changelog: ChangeLogRepository,
    today: Optional[date] = None,
    archive_day: int = 20,
) -> ArchiveRunResult:
    """
    Archive the current assessment for this month and draft a change record.

    Flow:
    1. Load and validate the current assessment
    2. Write the snapshot for the archive date (skipped if it already exists)
    3. Diff the archived snapshot against the immediately preceding snapshot
    4. Append the draft to the change log unless that date already has a record

    An existing snapshot does not stop the run; the draft is then generated
    from the snapshot on disk.

    Raises:
        StaleAggregatesError: Stored aggregates disagree with the category scores
        CorruptStateError: Current assessment, a snapshot or the change log
            fails validation
    """
    current = store.load()
    if store.is_stale:
        raise StaleAggregatesError(f"{store.path}: stored aggregates do not match scores; run an update first")

    archive_date = archive_date_for(today or date.today(), archive_day)
    period = period_label(archive_date)

    # 1. Snapshot
    outcome = history.archive(current, archive_date)
    record_archive(outcome.created)

    # 2. Draft change record against the previous archive point
    prior = history.latest_before(archive_date)
    record = generate_template(outcome.snapshot, prior, period, archive_date)

    # 3. Change log
    record_appended = False
    if changelog.has_record_for(archive_date):
        logger.info(
            "Change record already present, not appending",
            extra={"step": "changelog_skipped", "date": archive_date.isoformat()},
        )
    else:
        changelog.append(record)
        record_appended = True

    log_archive_run(
        archive_date=archive_date.isoformat(),
        snapshot_created=outcome.created,
        record_appended=record_appended,
        category_changes=len(record.category_changes),
        overall_change=record.overall_change,
    )

    return ArchiveRunResult(
        archive_date=archive_date,
        period=period,
        snapshot_created=outcome.created,
        record_appended=record_appended,
        record=record,
    )
