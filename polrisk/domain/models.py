"""Domain models - pure Python dataclasses representing assessment entities"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

TRENDS = ("increasing", "stable", "decreasing")
RISK_LEVELS = ("Low", "Moderate", "Elevated", "High", "Severe")

MIN_SCORE = 1
MAX_SCORE = 10


@dataclass
class CategoryScore:
    """Live score and evidence for one category"""

    score: int
    trend: str  # "increasing", "stable" or "decreasing"
    key_findings: List[str]
    last_updated: date
    sources: List[str] = field(default_factory=list)


@dataclass
class CategoryEdit:
    """Patch for one category; None fields keep the current value"""

    score: Optional[int] = None
    trend: Optional[str] = None
    key_findings: Optional[List[str]] = None
    sources: Optional[List[str]] = None


@dataclass
class Aggregates:
    """Derived figures for a full set of category scores"""

    domain_scores: Dict[str, float]
    overall_score: float
    risk_level: str


@dataclass
class CurrentAssessment:
    """The single live assessment"""

    assessment_date: date
    assessment_period: str
    scores: Dict[str, CategoryScore]
    domain_scores: Dict[str, float]
    overall_score: float
    risk_level: str

    def score_map(self) -> Dict[str, int]:
        return {category_id: cat.score for category_id, cat in self.scores.items()}


@dataclass(frozen=True)
class HistoricalSnapshot:
    """Archived scores for one period; findings, trends and sources are not retained"""

    date: date
    scores: Dict[str, int]
    domain_scores: Dict[str, float]
    overall_score: float
    risk_level: str

    def score_map(self) -> Dict[str, int]:
        return dict(self.scores)


@dataclass
class CategoryChange:
    """Score movement of one category between two periods"""

    category: str
    from_score: Optional[int]
    to_score: Optional[int]
    rationale: str


@dataclass
class ChangeRecord:
    """Analyst-facing change log entry for one archived period"""

    period: str
    date: date
    overall_score: float
    overall_change: Optional[float]
    summary: str
    key_developments: List[str]
    category_changes: List[CategoryChange] = field(default_factory=list)


def take_snapshot(current: CurrentAssessment, period_date: date) -> HistoricalSnapshot:
    """Freeze the bare scores and aggregates of an assessment for archiving"""
    return HistoricalSnapshot(
        date=period_date,
        scores=current.score_map(),
        domain_scores=dict(current.domain_scores),
        overall_score=current.overall_score,
        risk_level=current.risk_level,
    )
