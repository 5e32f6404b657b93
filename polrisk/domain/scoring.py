"""Score model - how category scores roll up into domain and overall scores"""

from typing import Dict, Mapping, Union

from polrisk.domain.models import Aggregates, CategoryScore
from polrisk.domain.exceptions import IncompleteScoresError
from polrisk.domain.taxonomy import CATEGORY_IDS, DOMAINS, domain_categories
from polrisk.utils.date_utils import round_half_up

ScoreInput = Mapping[str, Union[CategoryScore, int]]

# Lower bound of each risk band, highest first
RISK_BANDS = (
    (9, "Severe"),
    (7, "High"),
    (5, "Elevated"),
    (3, "Moderate"),
)


def _values(scores: ScoreInput, category_ids) -> list[int]:
    missing = [c for c in category_ids if c not in scores]
    if missing:
        raise IncompleteScoresError(missing)

    values = []
    for category_id in category_ids:
        entry = scores[category_id]
        values.append(entry.score if isinstance(entry, CategoryScore) else entry)
    return values


def domain_score(domain_id: str, scores: ScoreInput) -> float:
    """
    Mean of a domain's category scores, rounded to 2 decimals.

    Domain scores are a detail figure; the overall score is rounded coarser.

    Raises:
        UnknownDomainError: domain_id is not a fixed domain
        IncompleteScoresError: any category of the domain has no score
    """
    values = _values(scores, domain_categories(domain_id))
    return round_half_up(sum(values) / len(values), 2)


def overall_score(scores: ScoreInput) -> float:
    """
    Mean of all ten category scores, rounded to 1 decimal.

    Raises:
        IncompleteScoresError: any category has no score
    """
    values = _values(scores, CATEGORY_IDS)
    return round_half_up(sum(values) / len(values), 1)


def risk_level(score: float) -> str:
    """
    Map a score to its risk band.

    Bands are inclusive-low, exclusive-high except the top one:
    [1,3) Low, [3,5) Moderate, [5,7) Elevated, [7,9) High, [9,10] Severe
    """
    for lower_bound, label in RISK_BANDS:
        if score >= lower_bound:
            return label
    return "Low"


def calculate_aggregates(scores: ScoreInput) -> Aggregates:
    """Compute every derived figure for a full set of category scores"""
    domain_scores: Dict[str, float] = {d: domain_score(d, scores) for d in DOMAINS}
    overall = overall_score(scores)

    return Aggregates(
        domain_scores=domain_scores,
        overall_score=overall,
        risk_level=risk_level(overall),
    )
