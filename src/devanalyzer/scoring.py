"""Build-health score: penalties for errors, warnings and slow builds."""

import math

from devanalyzer.models import Metrics, Thresholds
from devanalyzer.patterns import Level

MAX_SCORE = 100
MAX_SLOW_BUILD_PENALTY = 30
SLOW_BUILD_STEP_MS = 10_000
SLOW_BUILD_STEP_PENALTY = 5

# (minimum score, level), highest first
_LEVEL_FLOORS = [
    (85, Level.EXCELLENT),
    (70, Level.GOOD),
    (50, Level.AVERAGE),
]


def slow_build_penalty(longest_ms: float, slow_build_ms: float) -> float:
    if not longest_ms or longest_ms <= slow_build_ms:
        return 0
    steps = math.ceil((longest_ms - slow_build_ms) / SLOW_BUILD_STEP_MS)
    return min(MAX_SLOW_BUILD_PENALTY, steps * SLOW_BUILD_STEP_PENALTY)


def derive_level(score: int) -> Level:
    for floor, level in _LEVEL_FLOORS:
        if score >= floor:
            return level
    return Level.POOR


def score(metrics: Metrics, thresholds: Thresholds | None = None) -> tuple[int, Level]:
    """Score ``metrics`` out of 100 and grade it.

    Fractional penalties are rounded after clamping.
    """
    thresholds = thresholds or Thresholds()

    value = MAX_SCORE
    value -= len(metrics.errors) * thresholds.error_penalty
    value -= len(metrics.warnings) * thresholds.warning_penalty
    value -= slow_build_penalty(metrics.longest_build_ms, thresholds.slow_build_ms)

    value = int(round(max(0, min(MAX_SCORE, value))))
    return value, derive_level(value)
