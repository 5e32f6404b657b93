"""Scenario tests for the interactive update session (scripted operator)"""

import json
from datetime import date

import pytest

from polrisk.infrastructure.storage.repositories import CurrentAssessmentStore
from polrisk.services.update_session import SessionState, UpdateSession

EDIT_DAY = date(2026, 2, 3)


@pytest.fixture
def run_session(scripted_prompter):
    def run(store, answers):
        prompter = scripted_prompter(answers)
        session = UpdateSession(store, prompter, today=lambda: EDIT_DAY)
        result = session.run()
        assert prompter.answers == [], "every scripted answer should be consumed"
        return result, prompter

    return run


def test_edit_and_save(store, run_session):
    """Full edit of one category, then save"""
    answers = [
        "1", "q",                                   # select Elections
        "9",                                        # score
        "i",                                        # trend
        "y", "Finding one", "Finding two", "",      # findings
        "y", "https://source.example/1", "",        # sources
        "",                                         # save (default yes)
    ]

    result, prompter = run_session(store, answers)

    assert result.state == SessionState.SAVED
    assert result.updated_categories == ["elections"]
    assert result.old_overall == 5.9
    assert result.new_overall == 6.1

    saved = CurrentAssessmentStore(store.path).load()
    elections = saved.scores["elections"]
    assert elections.score == 9
    assert elections.trend == "increasing"
    assert elections.key_findings == ["Finding one", "Finding two"]
    assert elections.sources == ["https://source.example/1"]
    assert elections.last_updated == EDIT_DAY
    assert saved.assessment_date == EDIT_DAY
    assert saved.domain_scores["rule-of-law"] == 6.67  # (9+6+5)/3
    assert saved.overall_score == 6.1
    assert "Overall Score: 5.9 -> 6.1" in prompter.output
    assert "rule-of-law: 6.67" in prompter.output


def test_decline_save_leaves_file_untouched(store, run_session):
    """Declining to save discards every edit"""
    raw_before = store.path.read_bytes()
    answers = ["0"]
    for _ in range(10):
        answers += ["2", "d", "n", "n"]
    answers.append("N")

    result, _ = run_session(store, answers)

    assert result.state == SessionState.DISCARDED
    assert len(result.updated_categories) == 10
    assert result.new_overall == 2.0
    assert store.path.read_bytes() == raw_before
    assert store.current.scores["elections"].score == 7


def test_empty_selection_ends_session(store, run_session):
    """No selection: no edits, no save prompt, nothing written"""
    raw_before = store.path.read_bytes()

    result, prompter = run_session(store, ["q"])

    assert result.state == SessionState.CANCELLED
    assert not any("Save changes" in p for p in prompter.prompts)
    assert "No categories selected. Exiting." in prompter.messages
    assert store.path.read_bytes() == raw_before


def test_malformed_input_keeps_prior_values(store, run_session):
    """Bad score/trend answers are ignored without re-prompting"""
    answers = [
        "1", "1", "q",          # duplicate selection
        "abc",                  # non-numeric score
        "x",                    # unknown trend code
        "", "",                 # findings/sources: keep
        "y",                    # save
    ]

    result, prompter = run_session(store, answers)

    assert result.state == SessionState.SAVED
    assert result.updated_categories == ["elections"]
    saved = CurrentAssessmentStore(store.path).load()
    assert saved.scores["elections"].score == 7
    assert saved.scores["elections"].trend == "stable"
    assert saved.scores["elections"].key_findings == ["Finding for elections"]
    assert saved.scores["elections"].last_updated == EDIT_DAY
    assert sum("New score" in p for p in prompter.prompts) == 1


def test_selection_ignores_garbage_and_keeps_order(store, run_session):
    answers = [
        "hello", "11", "", "-1", "3", "1", "3", "q",
        "", "", "", "",         # national-security
        "", "", "", "",         # elections
        "",
    ]

    result, _ = run_session(store, answers)

    assert result.updated_categories == ["national-security", "elections"]


def test_out_of_range_score_is_clamped(store, run_session):
    answers = ["4", "q", "42", "Stable", "", "", ""]

    run_session(store, answers)

    saved = CurrentAssessmentStore(store.path).load()
    assert saved.scores["regulatory-stability"].score == 10
    assert saved.scores["regulatory-stability"].trend == "stable"


def test_confirming_findings_without_lines_keeps_old_list(store, run_session):
    answers = ["2", "q", "", "", "y", "", "Y", "", ""]

    run_session(store, answers)

    on_disk = json.loads(store.path.read_text())
    assert on_disk["scores"]["rule-of-law"]["keyFindings"] == ["Finding for rule-of-law"]
    assert on_disk["scores"]["rule-of-law"]["sources"] == ["https://example.org/rule-of-law"]


def test_running_out_of_answers_aborts_without_saving(store, scripted_prompter):
    """Closed input mid-session propagates EOFError and leaves the file alone"""
    raw_before = store.path.read_bytes()
    prompter = scripted_prompter(["1", "q", "9"])

    with pytest.raises(EOFError):
        UpdateSession(store, prompter, today=lambda: EDIT_DAY).run()

    assert store.path.read_bytes() == raw_before
