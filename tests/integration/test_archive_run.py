"""Integration tests for the monthly archive run"""

import json
from datetime import date

import pytest

from polrisk.domain.exceptions import StaleAggregatesError
from polrisk.domain.models import CategoryEdit
from polrisk.services.archive import run_monthly_archive


def test_first_ever_archive(store, history, changelog):
    """No prior snapshot: null overall change and no category changes"""
    result = run_monthly_archive(store, history, changelog, today=date(2026, 1, 24))

    assert result.archive_date == date(2026, 1, 20)
    assert result.period == "January 2026"
    assert result.snapshot_created is True
    assert result.record_appended is True
    assert result.record.overall_change is None
    assert result.record.category_changes == []

    entries = json.loads(changelog.path.read_text())["changes"]
    assert len(entries) == 1
    assert entries[0]["overallChange"] is None
    assert entries[0]["categoryChanges"] == []
    assert entries[0]["date"] == "2026-01-20"


def test_diff_against_previous_archive_point(store, history, changelog, make_snapshot, write_snapshot):
    """Baseline is the snapshot before the new one, never the new one itself"""
    write_snapshot(make_snapshot(date(2025, 12, 20), {"elections": 5}))

    result = run_monthly_archive(store, history, changelog, today=date(2026, 1, 20))

    assert result.snapshot_created is True
    changes = [(c.category, c.from_score, c.to_score) for c in result.record.category_changes]
    assert changes == [("elections", 5, 7)]
    assert result.record.overall_change == 0.2

    entry = json.loads(changelog.path.read_text())["changes"][-1]
    assert entry["categoryChanges"][0]["from"] == 5
    assert entry["categoryChanges"][0]["to"] == 7
    assert entry["categoryChanges"][0]["rationale"].startswith("UPDATE:")


def test_rerun_same_month_is_idempotent(store, history, changelog, make_snapshot, write_snapshot):
    """Re-running skips the snapshot and the change-log append but still drafts the record"""
    write_snapshot(make_snapshot(date(2025, 12, 20), {"elections": 5}))
    run_monthly_archive(store, history, changelog, today=date(2026, 1, 20))
    snapshot_bytes = history.path_for(date(2026, 1, 20)).read_bytes()
    changelog_bytes = changelog.path.read_bytes()

    # Later edits to current do not leak into the already-archived month
    store.load()
    store.apply_category_edit("trade-policy", CategoryEdit(score=1))
    store.recompute()
    store.persist()

    result = run_monthly_archive(store, history, changelog, today=date(2026, 1, 28))

    assert result.snapshot_created is False
    assert result.record_appended is False
    assert [c.category for c in result.record.category_changes] == ["elections"]
    assert history.path_for(date(2026, 1, 20)).read_bytes() == snapshot_bytes
    assert changelog.path.read_bytes() == changelog_bytes
    assert history.dates() == [date(2025, 12, 20), date(2026, 1, 20)]


def test_appends_preserve_analyst_edits(store, history, changelog, data_dir):
    """Existing entries are kept exactly, including hand-added fields"""
    analyst_entry = {
        "period": "December 2025",
        "date": "2025-12-20",
        "overallScore": 5.7,
        "overallChange": 0.1,
        "summary": "Courts and elections dominated the month.",
        "keyDevelopments": ["Ruling A", "Ruling B"],
        "categoryChanges": [],
        "reviewedBy": "desk-2",
    }
    changelog.path.write_text(json.dumps({"changes": [analyst_entry]}))

    run_monthly_archive(store, history, changelog, today=date(2026, 1, 20))

    entries = json.loads(changelog.path.read_text())["changes"]
    assert entries[0] == analyst_entry
    assert entries[1]["period"] == "January 2026"


def test_missing_change_log_is_created(store, history, changelog):
    changelog.path.unlink()

    result = run_monthly_archive(store, history, changelog, today=date(2026, 3, 2))

    assert result.record_appended is True
    assert [r.date for r in changelog.records()] == [date(2026, 3, 20)]


def test_refuses_to_archive_inconsistent_aggregates(store, history, changelog, data_dir):
    document = json.loads(store.path.read_text())
    document["overallScore"] = 9.9
    store.path.write_text(json.dumps(document))

    with pytest.raises(StaleAggregatesError):
        run_monthly_archive(store, history, changelog, today=date(2026, 1, 20))
    assert history.dates() == []


def test_rerun_over_partial_snapshot(store, history, changelog, make_snapshot, write_snapshot):
    """An archived snapshot lacking a category still drafts a record, with a null 'to'"""
    write_snapshot(make_snapshot(date(2025, 12, 20)))
    partial = make_snapshot(date(2026, 1, 20))
    del partial.scores["fiscal-policy"]
    write_snapshot(partial)

    result = run_monthly_archive(store, history, changelog, today=date(2026, 1, 25))

    assert result.snapshot_created is False
    assert result.record_appended is True
    changes = [(c.category, c.from_score, c.to_score) for c in result.record.category_changes]
    assert changes == [("fiscal-policy", 6, None)]

    entry = json.loads(changelog.path.read_text())["changes"][-1]
    assert entry["categoryChanges"] == [
        {
            "category": "fiscal-policy",
            "from": 6,
            "to": None,
            "rationale": "UPDATE: Explain why fiscal-policy changed from 6 to None",
        }
    ]
    assert [r.category_changes[0].to_score for r in changelog.records()] == [None]
