"""Pytest fixtures for testing"""

import json
from datetime import date
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

import pytest

from polrisk.domain.models import CurrentAssessment, HistoricalSnapshot
from polrisk.domain.scoring import calculate_aggregates
from polrisk.infrastructure.storage.repositories import (
    ChangeLogRepository,
    CurrentAssessmentStore,
    HistoryArchive,
)

# Domain means: rule-of-law 6.0, operating-economic 6.0, societal-institutional 5.67; overall 5.9
SAMPLE_SCORES: Dict[str, int] = {
    "elections": 7,
    "rule-of-law": 6,
    "national-security": 5,
    "regulatory-stability": 6,
    "trade-policy": 7,
    "government-contracts": 5,
    "fiscal-policy": 6,
    "media-freedom": 5,
    "civil-discourse": 6,
    "institutional-integrity": 6,
}


def _document(scores: Dict[str, int], assessment_date: str = "2026-01-14") -> dict:
    aggregates = calculate_aggregates(scores)
    return {
        "assessmentDate": assessment_date,
        "assessmentPeriod": "January 2026",
        "scores": {
            category_id: {
                "score": score,
                "trend": "stable",
                "keyFindings": [f"Finding for {category_id}"],
                "sources": [f"https://example.org/{category_id}"],
                "lastUpdated": "2026-01-10",
            }
            for category_id, score in scores.items()
        },
        "domainScores": aggregates.domain_scores,
        "overallScore": aggregates.overall_score,
        "riskLevel": aggregates.risk_level,
    }


class ScriptedPrompter:
    """Replays canned answers; records every prompt and message"""

    def __init__(self, answers: Iterable[str]):
        self.answers: List[str] = list(answers)
        self.prompts: List[str] = []
        self.messages: List[str] = []

    def ask(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.answers:
            # Same as input() on a closed stdin
            raise EOFError(f"no answer left for prompt: {prompt!r}")
        return self.answers.pop(0)

    def say(self, message: str = "") -> None:
        self.messages.append(message)

    @property
    def output(self) -> str:
        return "\n".join(self.messages)


@pytest.fixture
def scripted_prompter() -> Callable[[Iterable[str]], ScriptedPrompter]:
    return ScriptedPrompter


@pytest.fixture
def sample_scores() -> Dict[str, int]:
    return dict(SAMPLE_SCORES)


@pytest.fixture
def current_document() -> Callable[..., dict]:
    """Factory for a valid current.json payload; pass scores to override any category"""

    def build(assessment_date: str = "2026-01-14", **scores: int) -> dict:
        merged = dict(SAMPLE_SCORES)
        merged.update({k.replace("_", "-"): v for k, v in scores.items()})
        return _document(merged, assessment_date)

    return build


@pytest.fixture
def data_dir(tmp_path: Path, current_document) -> Path:
    """Temporary data directory with a valid current.json and an empty change log"""
    (tmp_path / "history").mkdir()
    (tmp_path / "current.json").write_text(json.dumps(current_document(), indent=2) + "\n")
    (tmp_path / "historical-changes.json").write_text(json.dumps({"changes": []}, indent=2) + "\n")
    return tmp_path


@pytest.fixture
def store(data_dir: Path) -> CurrentAssessmentStore:
    return CurrentAssessmentStore(data_dir / "current.json")


@pytest.fixture
def history(data_dir: Path) -> HistoryArchive:
    return HistoryArchive(data_dir / "history")


@pytest.fixture
def changelog(data_dir: Path) -> ChangeLogRepository:
    return ChangeLogRepository(data_dir / "historical-changes.json")


@pytest.fixture
def make_snapshot() -> Callable[..., HistoricalSnapshot]:
    """Factory for a consistent snapshot; pass scores to override any category"""

    def build(snapshot_date: date, overrides: Optional[Dict[str, int]] = None) -> HistoricalSnapshot:
        scores = dict(SAMPLE_SCORES)
        scores.update(overrides or {})
        aggregates = calculate_aggregates(scores)
        return HistoricalSnapshot(
            date=snapshot_date,
            scores=scores,
            domain_scores=aggregates.domain_scores,
            overall_score=aggregates.overall_score,
            risk_level=aggregates.risk_level,
        )

    return build


@pytest.fixture
def write_snapshot(data_dir: Path) -> Callable[[HistoricalSnapshot], Path]:
    """Write a snapshot file directly, bypassing the archive"""

    def write(snapshot: HistoricalSnapshot) -> Path:
        path = data_dir / "history" / f"{snapshot.date.isoformat()}.json"
        payload = {
            "date": snapshot.date.isoformat(),
            "scores": snapshot.scores,
            "domainScores": snapshot.domain_scores,
            "overallScore": snapshot.overall_score,
            "riskLevel": snapshot.risk_level,
        }
        path.write_text(json.dumps(payload, indent=2) + "\n")
        return path

    return write


@pytest.fixture
def loaded_current(store: CurrentAssessmentStore) -> CurrentAssessment:
    return store.load()
