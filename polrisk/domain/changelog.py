"""Change-log generator - draft change records for analysts to annotate"""

from datetime import date
from typing import Optional, Union

from polrisk.domain.models import (
    CategoryChange,
    ChangeRecord,
    CurrentAssessment,
    HistoricalSnapshot,
)
from polrisk.domain.taxonomy import CATEGORY_IDS
from polrisk.utils.date_utils import round_half_up

PLACEHOLDER_PREFIX = "UPDATE:"
SUMMARY_PLACEHOLDER = f"{PLACEHOLDER_PREFIX} Brief summary of the month's key developments"
KEY_DEVELOPMENT_PLACEHOLDERS = [
    f"{PLACEHOLDER_PREFIX} Key development 1",
    f"{PLACEHOLDER_PREFIX} Key development 2",
    f"{PLACEHOLDER_PREFIX} Key development 3",
]


def rationale_placeholder(category_id: str, from_score: Optional[int], to_score: Optional[int]) -> str:
    return f"{PLACEHOLDER_PREFIX} Explain why {category_id} changed from {from_score} to {to_score}"


def generate_template(
    current: Union[CurrentAssessment, HistoricalSnapshot],
    prior_snapshot: Optional[HistoricalSnapshot],
    period: str,
    record_date: date,
) -> ChangeRecord:
    """
    Build a draft change record comparing current scores to the prior snapshot.

    The baseline must be the archived snapshot immediately preceding the period
    being recorded. Narrative fields are always placeholders: explaining why a
    score moved is left to the analyst.

    With no prior snapshot, overall_change is None and no category changes are
    reported. A category absent from either side is reported with None on
    that side; archived snapshots may hold a subset of the categories.
    """
    record = ChangeRecord(
        period=period,
        date=record_date,
        overall_score=current.overall_score,
        overall_change=None,
        summary=SUMMARY_PLACEHOLDER,
        key_developments=list(KEY_DEVELOPMENT_PLACEHOLDERS),
        category_changes=[],
    )

    if prior_snapshot is None:
        return record

    record.overall_change = round_half_up(current.overall_score - prior_snapshot.overall_score, 1)

    new_scores = current.score_map()
    for category_id in CATEGORY_IDS:
        old_score = prior_snapshot.scores.get(category_id)
        new_score = new_scores.get(category_id)
        if old_score != new_score:
            record.category_changes.append(
                CategoryChange(
                    category=category_id,
                    from_score=old_score,
                    to_score=new_score,
                    rationale=rationale_placeholder(category_id, old_score, new_score),
                )
            )

    return record
