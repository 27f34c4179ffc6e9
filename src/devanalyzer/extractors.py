"""
Small text extractors used by the line classifier.

Each one takes a single trimmed log line and returns a value or None;
none of them raise on odd input.
"""

import math
import re

from devanalyzer.patterns import (
    CLIENT_AND_SERVER,
    CLIENT_AND_SERVER_ANY_CASE,
    COMPILED_TARGET,
    COMPILING_TARGET,
    MILLIS,
    MODULES,
    PARENTHESIZED,
    SECONDS,
    TRAILING_ELLIPSIS,
    WAIT_PREFIX,
    BuildType,
)

DEFAULT_TARGET = "build"

_LEADING_NUMBER = re.compile(r"\d+(?:\.\d*)?|\.\d+")


def _leading_float(text: str) -> float | None:
    """Read the numeric prefix of a ``[\\d.]+`` capture ("1.2.3" -> 1.2)."""
    m = _LEADING_NUMBER.match(text)
    if not m:
        return None
    value = float(m.group(0))
    return value if math.isfinite(value) else None


def extract_duration_ms(text: str) -> float | None:
    """Duration in milliseconds; a seconds figure wins over a ms figure."""
    m = SECONDS.search(text)
    if m:
        seconds = _leading_float(m.group(1))
        if seconds is None:
            return None
        ms = seconds * 1000
        return ms if math.isfinite(ms) else None

    m = MILLIS.search(text)
    if m:
        return _leading_float(m.group(1))

    return None


def extract_module_count(text: str) -> int | None:
    m = MODULES.search(text)
    if not m:
        return None
    try:
        return int(m.group(1))
    except ValueError:
        # past the interpreter's int digit limit
        return None


def normalize_wait_target(line: str) -> str:
    """Target named by a ``- wait compiling /page (client and server)...`` line."""
    rest = line[len(WAIT_PREFIX):].strip()
    rest = TRAILING_ELLIPSIS.sub("", rest).strip()

    m = COMPILING_TARGET.search(rest)
    if m:
        return PARENTHESIZED.sub("", m.group(1), count=1).strip() or DEFAULT_TARGET

    return rest or DEFAULT_TARGET


def infer_target(line: str) -> str:
    m = COMPILED_TARGET.search(line)
    if m:
        return CLIENT_AND_SERVER_ANY_CASE.sub("", m.group(1), count=1).strip() or DEFAULT_TARGET
    return DEFAULT_TARGET


def infer_build_type(line: str, pending_target: str | None) -> BuildType:
    # An open wait window always means a recompile
    if pending_target is not None:
        return BuildType.INCREMENTAL
    return BuildType.INITIAL if CLIENT_AND_SERVER in line else BuildType.INCREMENTAL
