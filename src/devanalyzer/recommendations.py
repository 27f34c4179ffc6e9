"""Recommendations derived from parsed metrics and config-file presence."""

from __future__ import annotations

from devanalyzer.models import FileSnapshot, Metrics, Recommendation, Thresholds
from devanalyzer.patterns import IssueLevel


def format_ms(value: float) -> str:
    return f"{value:.0f}"


def build_recommendations(
    metrics: Metrics,
    config_files: list[FileSnapshot],
    thresholds: Thresholds | None = None,
) -> list[Recommendation]:
    """Errors, then warnings, then slow build, then missing config files.

    No deduplication: every error and warning gets its own entry.
    """
    thresholds = thresholds or Thresholds()
    recs: list[Recommendation] = []

    for error in metrics.errors:
        recs.append(Recommendation(IssueLevel.CRITICAL, error.message, error.details))

    for warning in metrics.warnings:
        recs.append(Recommendation(IssueLevel.WARNING, warning.message, warning.details))

    longest = metrics.longest_build_ms
    if longest and longest > thresholds.slow_build_ms:
        recs.append(Recommendation(
            IssueLevel.WARNING,
            f"Longest build took {format_ms(longest)} ms, over the "
            f"{format_ms(thresholds.slow_build_ms)} ms threshold. "
            "Check lazy loading, caching and code splitting.",
            {"longestBuildMs": longest},
        ))

    missing = [f.path for f in config_files if not f.exists]
    if missing:
        recs.append(Recommendation(
            IssueLevel.INFO,
            f"Some config files were not found: {', '.join(missing)}",
        ))

    return recs


def build_summary(metrics: Metrics, score: int) -> str:
    """One-line summary, e.g. ``Score 90/100 · Errors 0 · Warnings 2``."""
    parts = [
        f"Score {score}/100",
        f"Errors {len(metrics.errors)}",
        f"Warnings {len(metrics.warnings)}",
    ]
    if metrics.build_events:
        parts.append(f"Build events {len(metrics.build_events)}")
    if metrics.longest_build_ms:
        parts.append(f"Longest build {format_ms(metrics.longest_build_ms)} ms")
    return " · ".join(parts)
