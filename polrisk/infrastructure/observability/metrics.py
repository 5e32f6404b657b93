"""Prometheus metrics for batch runs, exported through the node-exporter textfile collector"""

from pathlib import Path
from typing import Dict

from prometheus_client import CollectorRegistry, Counter, Gauge, write_to_textfile

registry = CollectorRegistry()

# Update session metrics
category_edits_counter = Counter(
    "polrisk_category_edits_total",
    "Category edits applied to the current assessment",
    ["category"],
    registry=registry,
)

session_counter = Counter(
    "polrisk_sessions_total",
    "Interactive update sessions by outcome",
    ["outcome"],  # saved | discarded | cancelled
    registry=registry,
)

# Archive metrics
archive_run_counter = Counter(
    "polrisk_archive_runs_total",
    "Monthly archive runs by snapshot outcome",
    ["outcome"],  # created | skipped
    registry=registry,
)

# Published scores
overall_score_gauge = Gauge(
    "polrisk_overall_score",
    "Overall risk score of the current assessment",
    registry=registry,
)

domain_score_gauge = Gauge(
    "polrisk_domain_score",
    "Domain risk scores of the current assessment",
    ["domain"],
    registry=registry,
)


def record_scores(overall_score: float, domain_scores: Dict[str, float]) -> None:
    """Publish the latest aggregates"""
    overall_score_gauge.set(overall_score)
    for domain_id, score in domain_scores.items():
        domain_score_gauge.labels(domain=domain_id).set(score)


def record_session(outcome: str) -> None:
    session_counter.labels(outcome=outcome).inc()


def record_archive(created: bool) -> None:
    archive_run_counter.labels(outcome="created" if created else "skipped").inc()


def export_metrics(path: Path) -> None:
    """Write the registry in text exposition format (atomic)"""
    write_to_textfile(str(path), registry)
