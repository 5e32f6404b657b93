"""Pydantic schemas for the persisted JSON documents (camelCase wire format)"""

from datetime import date
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator, model_validator
from pydantic.alias_generators import to_camel

from polrisk.domain.models import (
    CategoryChange,
    CategoryScore,
    ChangeRecord,
    CurrentAssessment,
    HistoricalSnapshot,
    MAX_SCORE,
    MIN_SCORE,
)
from polrisk.domain.taxonomy import CATEGORY_DOMAIN, CATEGORY_IDS, DOMAIN_NAMES, DOMAINS

Trend = Literal["increasing", "stable", "decreasing"]
RiskLevel = Literal["Low", "Moderate", "Elevated", "High", "Severe"]
RUBRIC_TIERS = ("1-2", "3-4", "5-6", "7-8", "9-10")


class Document(BaseModel):
    """Base for persisted documents: camelCase on disk, snake_case in Python"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


def _check_domain_keys(domain_scores: Dict[str, float]) -> Dict[str, float]:
    if set(domain_scores) != set(DOMAINS):
        raise ValueError(f"domainScores must have exactly the domains {sorted(DOMAINS)}")
    return domain_scores


class CategoryScoreDocument(Document):
    """One entry of current.json 'scores'"""

    score: int = Field(..., strict=True, ge=MIN_SCORE, le=MAX_SCORE)
    trend: Trend
    key_findings: List[str]
    sources: List[str] = Field(default_factory=list)
    last_updated: date

    @classmethod
    def from_domain(cls, cat: CategoryScore) -> "CategoryScoreDocument":
        return cls(
            score=cat.score,
            trend=cat.trend,
            key_findings=list(cat.key_findings),
            sources=list(cat.sources),
            last_updated=cat.last_updated,
        )

    def to_domain(self) -> CategoryScore:
        return CategoryScore(
            score=self.score,
            trend=self.trend,
            key_findings=list(self.key_findings),
            sources=list(self.sources),
            last_updated=self.last_updated,
        )


class CurrentAssessmentDocument(Document):
    """data/current.json"""

    assessment_date: date
    assessment_period: str
    scores: Dict[str, CategoryScoreDocument]
    domain_scores: Dict[str, float]
    overall_score: float
    risk_level: RiskLevel

    @field_validator("scores")
    @classmethod
    def all_categories_present(cls, scores: Dict[str, CategoryScoreDocument]):
        missing = [c for c in CATEGORY_IDS if c not in scores]
        if missing:
            raise ValueError(f"missing categories: {', '.join(missing)}")
        unknown = sorted(c for c in scores if c not in CATEGORY_DOMAIN)
        if unknown:
            raise ValueError(f"unknown categories: {', '.join(unknown)}")
        return scores

    @field_validator("domain_scores")
    @classmethod
    def all_domains_present(cls, domain_scores: Dict[str, float]):
        return _check_domain_keys(domain_scores)

    @classmethod
    def from_domain(cls, current: CurrentAssessment) -> "CurrentAssessmentDocument":
        return cls(
            assessment_date=current.assessment_date,
            assessment_period=current.assessment_period,
            scores={c: CategoryScoreDocument.from_domain(current.scores[c]) for c in CATEGORY_IDS},
            domain_scores={d: current.domain_scores[d] for d in DOMAINS},
            overall_score=current.overall_score,
            risk_level=current.risk_level,
        )

    def to_domain(self) -> CurrentAssessment:
        return CurrentAssessment(
            assessment_date=self.assessment_date,
            assessment_period=self.assessment_period,
            scores={c: self.scores[c].to_domain() for c in CATEGORY_IDS},
            domain_scores={d: self.domain_scores[d] for d in DOMAINS},
            overall_score=self.overall_score,
            risk_level=self.risk_level,
        )


class HistoricalSnapshotDocument(Document):
    """data/history/YYYY-MM-DD.json"""

    date: date
    scores: Dict[str, StrictInt]
    domain_scores: Dict[str, float]
    overall_score: float
    risk_level: RiskLevel

    @field_validator("scores")
    @classmethod
    def known_categories_in_range(cls, scores: Dict[str, int]):
        # Older snapshots may predate a category, so a subset is accepted
        unknown = sorted(c for c in scores if c not in CATEGORY_DOMAIN)
        if unknown:
            raise ValueError(f"unknown categories: {', '.join(unknown)}")
        out_of_range = sorted(c for c, s in scores.items() if not MIN_SCORE <= s <= MAX_SCORE)
        if out_of_range:
            raise ValueError(f"scores out of range for: {', '.join(out_of_range)}")
        return scores

    @field_validator("domain_scores")
    @classmethod
    def all_domains_present(cls, domain_scores: Dict[str, float]):
        return _check_domain_keys(domain_scores)

    @classmethod
    def from_domain(cls, snapshot: HistoricalSnapshot) -> "HistoricalSnapshotDocument":
        return cls(
            date=snapshot.date,
            scores={c: snapshot.scores[c] for c in CATEGORY_IDS if c in snapshot.scores},
            domain_scores=dict(snapshot.domain_scores),
            overall_score=snapshot.overall_score,
            risk_level=snapshot.risk_level,
        )

    def to_domain(self) -> HistoricalSnapshot:
        return HistoricalSnapshot(
            date=self.date,
            scores=dict(self.scores),
            domain_scores=dict(self.domain_scores),
            overall_score=self.overall_score,
            risk_level=self.risk_level,
        )


class CategoryChangeDocument(BaseModel):
    """One 'categoryChanges' entry"""

    model_config = ConfigDict(populate_by_name=True)

    category: str
    from_score: Optional[int] = Field(None, alias="from")
    to_score: Optional[int] = Field(None, alias="to")
    rationale: str

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class ChangeRecordDocument(Document):
    """One entry of data/historical-changes.json 'changes'"""

    period: str
    date: date
    overall_score: float
    overall_change: Optional[float] = None
    summary: str
    key_developments: List[str]
    category_changes: List[CategoryChangeDocument] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, record: ChangeRecord) -> "ChangeRecordDocument":
        return cls(
            period=record.period,
            date=record.date,
            overall_score=record.overall_score,
            overall_change=record.overall_change,
            summary=record.summary,
            key_developments=list(record.key_developments),
            category_changes=[
                CategoryChangeDocument(
                    category=c.category,
                    from_score=c.from_score,
                    to_score=c.to_score,
                    rationale=c.rationale,
                )
                for c in record.category_changes
            ],
        )

    def to_domain(self) -> ChangeRecord:
        return ChangeRecord(
            period=self.period,
            date=self.date,
            overall_score=self.overall_score,
            overall_change=self.overall_change,
            summary=self.summary,
            key_developments=list(self.key_developments),
            category_changes=[
                CategoryChange(
                    category=c.category,
                    from_score=c.from_score,
                    to_score=c.to_score,
                    rationale=c.rationale,
                )
                for c in self.category_changes
            ],
        )


class ChangeLogDocument(Document):
    """data/historical-changes.json"""

    changes: List[ChangeRecordDocument] = Field(default_factory=list)


class CategoryMetadataDocument(Document):
    """Static description and rubric of one category"""

    id: str
    name: str
    domain: str
    domain_name: str
    description: str
    rubric: Dict[str, str]

    @field_validator("rubric")
    @classmethod
    def all_tiers_present(cls, rubric: Dict[str, str]):
        missing = [t for t in RUBRIC_TIERS if t not in rubric]
        if missing:
            raise ValueError(f"rubric missing tiers: {', '.join(missing)}")
        return rubric


class CategoriesDocument(Document):
    """data/categories.json - reference data, never written by this package"""

    categories: List[CategoryMetadataDocument]

    @model_validator(mode="after")
    def matches_taxonomy(self):
        seen = {}
        for cat in self.categories:
            if cat.id not in CATEGORY_DOMAIN:
                raise ValueError(f"unknown category: {cat.id!r}")
            if cat.id in seen:
                raise ValueError(f"duplicate category: {cat.id!r}")
            if cat.domain != CATEGORY_DOMAIN[cat.id]:
                raise ValueError(
                    f"category {cat.id!r} listed under {cat.domain!r}, expected {CATEGORY_DOMAIN[cat.id]!r}"
                )
            if cat.domain_name != DOMAIN_NAMES[cat.domain]:
                raise ValueError(
                    f"category {cat.id!r} has domainName {cat.domain_name!r}, expected {DOMAIN_NAMES[cat.domain]!r}"
                )
            seen[cat.id] = cat
        missing = [c for c in CATEGORY_IDS if c not in seen]
        if missing:
            raise ValueError(f"missing categories: {', '.join(missing)}")
        return self
