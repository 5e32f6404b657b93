"""
Interactive update session for the current assessment.

The operator picks categories, edits score/trend/findings/sources for each,
reviews the recomputed aggregates and decides whether to save. Input is
lenient: an empty answer keeps the current value and a malformed one is
ignored without re-prompting.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Callable, List, Optional

from polrisk.domain.models import CategoryEdit, CurrentAssessment
from polrisk.domain.taxonomy import CATEGORY_IDS, CATEGORY_NAMES
from polrisk.infrastructure.observability.metrics import (
    category_edits_counter,
    record_scores,
    record_session,
)
from polrisk.infrastructure.storage.repositories import CurrentAssessmentStore, clamp_score
from polrisk.services.prompts import Prompter

logger = logging.getLogger(__name__)

TREND_CODES = {"i": "increasing", "s": "stable", "d": "decreasing"}
SELECT_ALL = "0"
FINISH_SELECTION = "q"

_LEADING_INT = re.compile(r"[+-]?\d+")


class SessionState(str, Enum):
    SELECTING_CATEGORIES = "selecting_categories"
    EDITING_SCORE = "editing_score"
    EDITING_TREND = "editing_trend"
    EDITING_FINDINGS = "editing_findings"
    EDITING_SOURCES = "editing_sources"
    RECOMPUTING = "recomputing"
    CONFIRMING_SAVE = "confirming_save"
    SAVED = "saved"
    DISCARDED = "discarded"
    CANCELLED = "cancelled"


@dataclass
class UpdateResult:
    """Outcome of an update session"""

    state: SessionState
    updated_categories: List[str] = field(default_factory=list)
    old_overall: Optional[float] = None
    new_overall: Optional[float] = None


def parse_score(text: str) -> Optional[int]:
    """Leading integer of text clamped to 1-10, or None if there is none"""
    match = _LEADING_INT.match(text.strip())
    if not match:
        return None
    return clamp_score(int(match.group()))


def parse_trend(text: str) -> Optional[str]:
    """Full trend word or its first letter, case-insensitive; None if unrecognised"""
    answer = text.strip().lower()
    if not answer:
        return None
    if answer in TREND_CODES.values():
        return answer
    return TREND_CODES.get(answer[0])


def _truncate(text: str, width: int) -> str:
    return text if len(text) <= width else f"{text[:width]}..."


class UpdateSession:
    """One operator-driven edit of the current assessment"""

    def __init__(
        self,
        store: CurrentAssessmentStore,
        prompter: Prompter,
        today: Callable[[], date] = date.today,
    ):
        self.store = store
        self.prompter = prompter
        self.today = today
        self.state = SessionState.SELECTING_CATEGORIES

    def run(self) -> UpdateResult:
        current = self.store.load()
        say = self.prompter.say

        say(f"Current overall score: {current.overall_score} ({current.risk_level})")
        say(f"Assessment date: {current.assessment_date.isoformat()}")

        selected = self.select_categories()
        if not selected:
            say("No categories selected. Exiting.")
            return self._finish(UpdateResult(state=SessionState.CANCELLED))

        say(f"Updating {len(selected)} categories...")
        for category_id in selected:
            self.update_category(current, category_id)

        self.state = SessionState.RECOMPUTING
        old_overall = current.overall_score
        aggregates = self.store.recompute(assessment_date=self.today())

        say("=== Recalculated Scores ===")
        say("Domain Scores:")
        for domain_id, score in aggregates.domain_scores.items():
            say(f"  {domain_id}: {score}")
        say(f"Overall Score: {old_overall} -> {aggregates.overall_score}")
        say(f"Risk Level: {aggregates.risk_level}")

        result = UpdateResult(
            state=SessionState.CONFIRMING_SAVE,
            updated_categories=selected,
            old_overall=old_overall,
            new_overall=aggregates.overall_score,
        )

        self.state = SessionState.CONFIRMING_SAVE
        if self.prompter.ask("Save changes? [Y/n]: ").strip().lower() == "n":
            self.store.discard()
            say("Changes discarded.")
            result.state = SessionState.DISCARDED
        else:
            self.store.persist()
            record_scores(aggregates.overall_score, aggregates.domain_scores)
            say(f"[OK] Saved to {self.store.path}")
            result.state = SessionState.SAVED

        return self._finish(result)

    def select_categories(self) -> List[str]:
        """Accumulate a de-duplicated selection; '0' selects all, 'q' finishes"""
        self.state = SessionState.SELECTING_CATEGORIES
        say = self.prompter.say

        say("Categories:")
        for i, category_id in enumerate(CATEGORY_IDS, start=1):
            say(f"  {i}. {CATEGORY_NAMES[category_id]}")
        say(f"  {SELECT_ALL}. All categories")
        say(f"  {FINISH_SELECTION}. Done selecting")

        selected: List[str] = []
        while True:
            answer = self.prompter.ask("Select category (number, 0 for all, q to finish): ").strip()
            if answer.lower() == FINISH_SELECTION:
                break
            if answer == SELECT_ALL:
                selected = list(CATEGORY_IDS)
                say("  Selected all categories")
                break
            if answer.isdigit() and 1 <= int(answer) <= len(CATEGORY_IDS):
                category_id = CATEGORY_IDS[int(answer) - 1]
                if category_id not in selected:
                    selected.append(category_id)
                say(f"  Added: {CATEGORY_NAMES[category_id]}")
        return selected

    def update_category(self, current: CurrentAssessment, category_id: str) -> None:
        ask, say = self.prompter.ask, self.prompter.say
        category = current.scores[category_id]
        edit = CategoryEdit()

        say(f"=== {CATEGORY_NAMES[category_id]} ===")
        say(f"Current score: {category.score}, Trend: {category.trend}")
        say(f"Last updated: {category.last_updated.isoformat()}")

        self.state = SessionState.EDITING_SCORE
        edit.score = parse_score(ask(f"New score (1-10, Enter to keep {category.score}): "))
        if edit.score is not None:
            say(f"  Score updated to: {edit.score}")

        self.state = SessionState.EDITING_TREND
        edit.trend = parse_trend(
            ask(f"Trend [i]ncreasing/[s]table/[d]ecreasing (Enter to keep {category.trend}): ")
        )
        if edit.trend is not None:
            say(f"  Trend updated to: {edit.trend}")

        self.state = SessionState.EDITING_FINDINGS
        say("Current findings:")
        for i, finding in enumerate(category.key_findings, start=1):
            say(f"  {i}. {_truncate(finding, 80)}")
        edit.key_findings = self._collect_lines("Update findings? [y/N]: ", "Finding")
        if edit.key_findings is not None:
            say(f"  Updated {len(edit.key_findings)} findings")

        self.state = SessionState.EDITING_SOURCES
        say("Current sources:")
        for i, source in enumerate(category.sources, start=1):
            say(f"  {i}. {_truncate(source, 60)}")
        edit.sources = self._collect_lines("Update sources? [y/N]: ", "Source")
        if edit.sources is not None:
            say(f"  Updated {len(edit.sources)} sources")

        updated = self.store.apply_category_edit(category_id, edit, edit_date=self.today())
        category_edits_counter.labels(category=category_id).inc()
        say(f"  Last updated set to: {updated.last_updated.isoformat()}")

    def _collect_lines(self, confirm_prompt: str, label: str) -> Optional[List[str]]:
        """Lines entered until a blank one; None when declined or nothing entered"""
        if self.prompter.ask(confirm_prompt).strip().lower() != "y":
            return None

        self.prompter.say(f"Enter new {label.lower()}s (empty line to finish):")
        lines: List[str] = []
        while True:
            line = self.prompter.ask(f"  {label} {len(lines) + 1}: ").strip()
            if not line:
                break
            lines.append(line)
        return lines or None

    def _finish(self, result: UpdateResult) -> UpdateResult:
        self.state = result.state
        record_session(result.state.value)
        logger.info(
            "Update session finished",
            extra={
                "step": "session_finished",
                "outcome": result.state.value,
                "categories": result.updated_categories,
                "old_overall": result.old_overall,
                "new_overall": result.new_overall,
            },
        )
        return result
