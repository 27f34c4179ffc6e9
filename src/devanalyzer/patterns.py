"""
Marker and regex registry for dev-server log classification.

To support another framework:
  - Add its line markers and extraction regexes in a new section below
  - Write a parser for it in parsers.py and register it in PARSERS

Markers are matched against trimmed lines; regexes are searched, so the
first occurrence anywhere in the line wins.
"""

import re
from enum import Enum


class IssueLevel(Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class BuildType(Enum):
    INITIAL = "initial"
    INCREMENTAL = "incremental"


class LogSource(Enum):
    STDOUT = "stdout"
    STDERR = "stderr"


class Level(Enum):
    """Overall build-health grade derived from the score."""
    EXCELLENT = "Excellent"
    GOOD = "Good"
    AVERAGE = "Average"
    POOR = "Poor"


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------

ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;]*m")

# Detail lines printed under a multi-line diagnostic
DETAIL_INDENT = " " * 8


# ---------------------------------------------------------------------------
# Next.js
# ---------------------------------------------------------------------------

NEXT_KEYWORD = "next"

WAIT_PREFIX = "- wait"
EVENT_COMPILED_PREFIX = "- event compiled"
DUPLICATE_PAGE_PREFIX = "Duplicate page detected"
LAYOUT_PAGE_PREFIX = 'The page component is named "layout"'
PATCHED_MARKER = "was successfully patched"
WARN_PREFIXES = ("- warn", "warn -")
DEPRECATION_MARKER = "DeprecationWarning"
CLIENT_AND_SERVER = "client and server"

SECONDS = re.compile(r"([\d.]+)\s*s")
MILLIS = re.compile(r"([\d.]+)\s*ms")
MODULES = re.compile(r"(\d+)\s*modules")

TRAILING_ELLIPSIS = re.compile(r"\.\.\.$")
COMPILING_TARGET = re.compile(r"compiling\s+(.+)", re.I)
COMPILED_TARGET = re.compile(r"compiled\s+(.*)\s+successfully", re.I)
CLIENT_AND_SERVER_ANY_CASE = re.compile(r"client and server", re.I)
PARENTHESIZED = re.compile(r"\(.*\)")
