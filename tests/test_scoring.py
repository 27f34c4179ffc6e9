"""Tests for the build-health score and level."""

import pytest

from conftest import make_lines
from devanalyzer.models import BuildEvent, Issue, Metrics, Thresholds
from devanalyzer.patterns import BuildType, IssueLevel, Level
from devanalyzer.scoring import derive_level, score, slow_build_penalty


def make_metrics(errors=0, warnings=0, longest=None):
    summary = {}
    events = []
    if longest is not None:
        events = [BuildEvent("build", longest, None, BuildType.INITIAL)]
        summary = {"eventCount": 1, "longestBuildMs": longest, "longestTarget": "build"}
    return Metrics(
        build_events=events,
        errors=[Issue(IssueLevel.ERROR, f"e{i}") for i in range(errors)],
        warnings=[Issue(IssueLevel.WARNING, f"w{i}") for i in range(warnings)],
        summary=summary,
    )


class TestScore:
    def test_clean_metrics_score_full(self):
        assert score(Metrics()) == (100, Level.EXCELLENT)

    def test_two_warnings(self):
        assert score(make_metrics(warnings=2)) == (90, Level.EXCELLENT)

    def test_sample_log_is_good(self, next_log_lines):
        from devanalyzer.parsers import transform_logs

        metrics = transform_logs("Next.js", next_log_lines).metrics
        assert score(metrics) == (70, Level.GOOD)

    def test_clamped_at_zero(self):
        assert score(make_metrics(errors=10)) == (0, Level.POOR)

    def test_notes_do_not_count(self):
        metrics = Metrics(notes=[Issue(IssueLevel.INFO, "patched")])
        assert score(metrics)[0] == 100

    def test_just_over_threshold_costs_one_step(self):
        assert score(make_metrics(longest=30_001))[0] == 95

    def test_slow_build_without_issues(self):
        assert score(make_metrics(longest=45_000)) == (90, Level.EXCELLENT)

    def test_slow_build_from_parsed_log(self):
        from devanalyzer.parsers import transform_logs

        lines = make_lines(["- event compiled client and server successfully in 45s (900 modules)"])
        metrics = transform_logs("Next.js", lines).metrics
        assert metrics.longest_build_ms == 45_000
        assert score(metrics) == (90, Level.EXCELLENT)

    def test_at_threshold_costs_nothing(self):
        assert score(make_metrics(longest=30_000))[0] == 100

    def test_custom_thresholds(self):
        thresholds = Thresholds(warning_penalty=10, error_penalty=50, slow_build_ms=1_000)
        assert score(make_metrics(errors=1, warnings=1, longest=500), thresholds)[0] == 40

    def test_fractional_penalty_rounded(self):
        thresholds = Thresholds(warning_penalty=2.5)
        assert score(make_metrics(warnings=1), thresholds)[0] == 98

    def test_more_errors_never_raise_score(self):
        scores = [score(make_metrics(errors=n))[0] for n in range(6)]
        assert scores == sorted(scores, reverse=True)

    def test_more_warnings_never_raise_score(self):
        scores = [score(make_metrics(warnings=n))[0] for n in range(25)]
        assert scores == sorted(scores, reverse=True)


class TestSlowBuildPenalty:
    @pytest.mark.parametrize(
        "longest, expected",
        [(0, 0), (30_000, 0), (30_001, 5), (40_000, 5), (40_001, 10), (90_000, 30), (500_000, 30)],
    )
    def test_steps(self, longest, expected):
        assert slow_build_penalty(longest, 30_000) == expected


class TestDeriveLevel:
    @pytest.mark.parametrize(
        "value, level",
        [
            (100, Level.EXCELLENT),
            (85, Level.EXCELLENT),
            (84, Level.GOOD),
            (70, Level.GOOD),
            (69, Level.AVERAGE),
            (50, Level.AVERAGE),
            (49, Level.POOR),
            (0, Level.POOR),
        ],
    )
    def test_boundaries(self, value, level):
        assert derive_level(value) == level
