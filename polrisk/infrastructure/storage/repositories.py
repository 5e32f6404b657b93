"""Data access layer for the assessment JSON documents"""

import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from polrisk.domain.exceptions import CorruptStateError, InvalidTrendError, StaleAggregatesError
from polrisk.domain.models import (
    Aggregates,
    CategoryEdit,
    CategoryScore,
    ChangeRecord,
    CurrentAssessment,
    HistoricalSnapshot,
    MAX_SCORE,
    MIN_SCORE,
    TRENDS,
    take_snapshot,
)
from polrisk.domain.scoring import calculate_aggregates
from polrisk.domain.taxonomy import require_category
from polrisk.infrastructure.storage.files import atomic_create_json, atomic_write_json, read_json
from polrisk.infrastructure.storage.schemas import (
    CategoriesDocument,
    CategoryMetadataDocument,
    ChangeLogDocument,
    ChangeRecordDocument,
    CurrentAssessmentDocument,
    HistoricalSnapshotDocument,
)

logger = logging.getLogger(__name__)


def _validation_error(path: Path, error: ValidationError) -> CorruptStateError:
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}" for err in error.errors()
    )
    return CorruptStateError(f"{path}: {problems}")


def clamp_score(score: int) -> int:
    """Clamp a score into the valid range instead of rejecting it"""
    return max(MIN_SCORE, min(MAX_SCORE, int(score)))


class CurrentAssessmentStore:
    """Repository for the single live assessment (data/current.json)"""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._current: Optional[CurrentAssessment] = None
        self._stale = False

    @property
    def current(self) -> CurrentAssessment:
        if self._current is None:
            return self.load()
        return self._current

    @property
    def is_stale(self) -> bool:
        """True when aggregates no longer reflect the category scores"""
        return self._stale

    def load(self) -> CurrentAssessment:
        """
        Read and validate the persisted assessment.

        Raises:
            CorruptStateError: Missing/unknown category, score out of range,
                or any other structural problem
        """
        try:
            document = CurrentAssessmentDocument.model_validate(read_json(self.path))
        except ValidationError as e:
            raise _validation_error(self.path, e) from e

        current = document.to_domain()
        self._current = current
        self._stale = False

        expected = calculate_aggregates(current.scores)
        if (
            expected.domain_scores != current.domain_scores
            or expected.overall_score != current.overall_score
            or expected.risk_level != current.risk_level
        ):
            # Hand-edited file; keep what was stored but refuse to persist it unrecomputed
            self._stale = True
            logger.warning(
                "Stored aggregates do not match category scores",
                extra={
                    "step": "aggregates_mismatch",
                    "stored_overall": current.overall_score,
                    "expected_overall": expected.overall_score,
                },
            )

        logger.info(
            "Assessment loaded",
            extra={
                "step": "assessment_loaded",
                "path": str(self.path),
                "assessment_date": current.assessment_date.isoformat(),
                "overall_score": current.overall_score,
            },
        )
        return current

    def apply_category_edit(
        self,
        category_id: str,
        edit: CategoryEdit,
        edit_date: Optional[date] = None,
    ) -> CategoryScore:
        """
        Replace the given fields of one category and stamp last_updated.

        Scores outside 1-10 are clamped to the nearest bound.

        Raises:
            UnknownCategoryError: category_id is not a fixed category
            InvalidTrendError: trend is not increasing/stable/decreasing
        """
        require_category(category_id)
        if edit.trend is not None and edit.trend not in TRENDS:
            raise InvalidTrendError(edit.trend)

        category = self.current.scores[category_id]
        if edit.score is not None:
            category.score = clamp_score(edit.score)
        if edit.trend is not None:
            category.trend = edit.trend
        if edit.key_findings is not None:
            category.key_findings = list(edit.key_findings)
        if edit.sources is not None:
            category.sources = list(edit.sources)
        category.last_updated = edit_date or date.today()

        self._stale = True
        logger.info(
            "Category edited",
            extra={"step": "category_edited", "category": category_id, "score": category.score},
        )
        return category

    def recompute(self, assessment_date: Optional[date] = None) -> Aggregates:
        """Derive domain/overall scores and risk level from the category scores"""
        current = self.current
        aggregates = calculate_aggregates(current.scores)

        current.domain_scores = aggregates.domain_scores
        current.overall_score = aggregates.overall_score
        current.risk_level = aggregates.risk_level
        current.assessment_date = assessment_date or date.today()
        self._stale = False

        logger.info(
            "Aggregates recomputed",
            extra={
                "step": "aggregates_recomputed",
                "overall_score": aggregates.overall_score,
                "risk_level": aggregates.risk_level,
            },
        )
        return aggregates

    def persist(self) -> None:
        """
        Atomically overwrite the backing file with the in-memory assessment.

        Raises:
            StaleAggregatesError: Edits were applied without recompute()
        """
        if self._stale:
            raise StaleAggregatesError("Aggregates are out of date; call recompute() before persist()")

        document = CurrentAssessmentDocument.from_domain(self.current)
        atomic_write_json(self.path, document.to_json_dict())
        logger.info("Assessment persisted", extra={"step": "assessment_persisted", "path": str(self.path)})

    def discard(self) -> CurrentAssessment:
        """Drop in-memory edits by reloading the persisted assessment"""
        return self.load()


@dataclass
class ArchiveOutcome:
    """Result of an archive call"""

    snapshot: HistoricalSnapshot
    created: bool
    path: Path


class HistoryArchive:
    """Append-only collection of dated snapshots (data/history/YYYY-MM-DD.json)"""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def path_for(self, period_date: date) -> Path:
        return self.directory / f"{period_date.isoformat()}.json"

    def archive(self, current: CurrentAssessment, period_date: date) -> ArchiveOutcome:
        """
        Write a snapshot for period_date unless one already exists.

        An existing snapshot is left untouched and reported with created=False.
        """
        path = self.path_for(period_date)
        existing = self.get(period_date)
        if existing is not None:
            logger.info(
                "Snapshot already exists, skipping",
                extra={"step": "snapshot_skipped", "date": period_date.isoformat(), "path": str(path)},
            )
            return ArchiveOutcome(snapshot=existing, created=False, path=path)

        snapshot = take_snapshot(current, period_date)
        document = HistoricalSnapshotDocument.from_domain(snapshot)
        created = atomic_create_json(path, document.to_json_dict())
        if not created:
            # Lost a race with another writer; the file on disk wins
            logger.info(
                "Snapshot already exists, skipping",
                extra={"step": "snapshot_skipped", "date": period_date.isoformat(), "path": str(path)},
            )
            return ArchiveOutcome(snapshot=self.get(period_date), created=False, path=path)

        logger.info(
            "Snapshot archived",
            extra={"step": "snapshot_archived", "date": period_date.isoformat(), "path": str(path)},
        )
        return ArchiveOutcome(snapshot=snapshot, created=True, path=path)

    def dates(self) -> List[date]:
        """Archived dates in ascending order"""
        if not self.directory.is_dir():
            return []

        found = []
        for path in self.directory.glob("*.json"):
            try:
                found.append(date.fromisoformat(path.stem))
            except ValueError:
                logger.warning("Ignoring non-snapshot file", extra={"path": str(path)})
        return sorted(found)

    def get(self, period_date: date) -> Optional[HistoricalSnapshot]:
        """
        Snapshot for period_date, or None if not archived.

        Raises:
            CorruptStateError: Snapshot file fails validation
        """
        path = self.path_for(period_date)
        if not path.exists():
            return None
        try:
            document = HistoricalSnapshotDocument.model_validate(read_json(path))
        except ValidationError as e:
            raise _validation_error(path, e) from e
        if document.date != period_date:
            raise CorruptStateError(f"{path}: date field {document.date} does not match file name")
        return document.to_domain()

    def snapshots(self) -> List[HistoricalSnapshot]:
        """All snapshots ordered by date"""
        return [self.get(d) for d in self.dates()]

    def latest(self) -> Optional[HistoricalSnapshot]:
        """Most recent snapshot"""
        dates = self.dates()
        return self.get(dates[-1]) if dates else None

    def latest_before(self, period_date: date) -> Optional[HistoricalSnapshot]:
        """Most recent snapshot strictly earlier than period_date"""
        earlier = [d for d in self.dates() if d < period_date]
        return self.get(earlier[-1]) if earlier else None


class ChangeLogRepository:
    """Repository for the change log (data/historical-changes.json)"""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read_raw(self) -> dict:
        if not self.path.exists():
            return {"changes": []}
        raw = read_json(self.path)
        try:
            ChangeLogDocument.model_validate(raw)
        except ValidationError as e:
            raise _validation_error(self.path, e) from e
        raw.setdefault("changes", [])
        return raw

    def records(self) -> List[ChangeRecord]:
        """Change records in log order"""
        raw = self._read_raw()
        return [ChangeRecordDocument.model_validate(entry).to_domain() for entry in raw["changes"]]

    def has_record_for(self, record_date: date) -> bool:
        return any(r.date == record_date for r in self.records())

    def append(self, record: ChangeRecord) -> None:
        """
        Append a record at the end of the log.

        Existing entries are written back exactly as read, including any
        fields analysts added by hand.
        """
        raw = self._read_raw()
        raw["changes"].append(ChangeRecordDocument.from_domain(record).to_json_dict())
        atomic_write_json(self.path, raw)
        logger.info(
            "Change record appended",
            extra={"step": "changelog_appended", "date": record.date.isoformat(), "period": record.period},
        )


class CategoryMetadataRepository:
    """Read-only access to category descriptions and rubrics (data/categories.json)"""

    def __init__(self, path: Path):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> List[CategoryMetadataDocument]:
        """
        Raises:
            CorruptStateError: Document does not match the fixed taxonomy
        """
        try:
            document = CategoriesDocument.model_validate(read_json(self.path))
        except ValidationError as e:
            raise _validation_error(self.path, e) from e
        return document.categories
