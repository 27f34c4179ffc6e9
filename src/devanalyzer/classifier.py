
"""
Core classification engine for Next.js dev-server output.

Folds log lines one at a time into an immutable ClassifierState:
wait windows, compiled build events, errors, warnings and notes.
The same fold backs both batch parsing and streaming.
"""

from dataclasses import dataclass, replace
from functools import reduce
from typing import Iterable, NamedTuple

from devanalyzer.extractors import (
    extract_duration_ms,
    extract_module_count,
    infer_build_type,
    infer_target,
    normalize_wait_target,
)
from devanalyzer.models import BuildEvent, Issue, Metrics
from devanalyzer.patterns import (
    ANSI_ESCAPE,
    DEPRECATION_MARKER,
    DETAIL_INDENT,
    DUPLICATE_PAGE_PREFIX,
    EVENT_COMPILED_PREFIX,
    LAYOUT_PAGE_PREFIX,
    PATCHED_MARKER,
    WAIT_PREFIX,
    WARN_PREFIXES,
    IssueLevel,
)

# Buckets a classified line can land in
BUILD_EVENTS = "build_events"
ERRORS = "errors"
WARNINGS = "warnings"
NOTES = "notes"


# Append-only record chain: ``(newest, rest)`` pairs ending in None.
# Pushing is O(1) and never copies; ``_unwind`` flattens once at the end.
Chain = tuple | None


def _push(chain: Chain, item) -> tuple:
    return (item, chain)


def _unwind(chain: Chain) -> list:
    items = []
    while chain is not None:
        item, chain = chain
        items.append(item)
    items.reverse()
    return items


class Classification(NamedTuple):
    """Outcome of classifying one line: the next wait target and an optional record."""
    pending_wait_target: str | None
    bucket: str | None = None
    record: BuildEvent | Issue | None = None
    opens_detail_block: bool = False


@dataclass(frozen=True)
class ClassifierState:
    """Fold state. Record buckets are chains; read them through ``to_metrics``."""
    pending_wait_target: str | None = None
    build_events: Chain = None
    warnings: Chain = None
    errors: Chain = None
    notes: Chain = None
    error_count: int = 0

    # Indented lines seen while at least one detail block was open
    detail_lines: Chain = None
    detail_count: int = 0
    # (error index, first detail line) for blocks still collecting
    open_detail_blocks: Chain = None
    # (error index, first detail line, end) for finished blocks
    closed_detail_blocks: Chain = None


def clean_line(raw: str) -> str:
    return ANSI_ESCAPE.sub("", raw)


def classify_line(line: str, pending_wait_target: str | None) -> Classification:
    """Classify one trimmed, non-empty line. First matching rule wins."""
    if line.startswith(WAIT_PREFIX):
        return Classification(normalize_wait_target(line))

    if line.startswith(EVENT_COMPILED_PREFIX):
        event = BuildEvent(
            target=pending_wait_target if pending_wait_target is not None else infer_target(line),
            duration_ms=extract_duration_ms(line),
            modules=extract_module_count(line),
            type=infer_build_type(line, pending_wait_target),
        )
        return Classification(None, BUILD_EVENTS, event)

    if line.startswith(DUPLICATE_PAGE_PREFIX):
        return Classification(
            pending_wait_target, ERRORS, Issue(level=IssueLevel.ERROR, message=line)
        )

    if line.startswith(LAYOUT_PAGE_PREFIX):
        issue = Issue(level=IssueLevel.ERROR, message=line, details={"routes": []})
        return Classification(pending_wait_target, ERRORS, issue, opens_detail_block=True)

    if PATCHED_MARKER in line:
        return Classification(
            pending_wait_target, NOTES, Issue(level=IssueLevel.INFO, message=line)
        )

    if line.startswith(WARN_PREFIXES) or DEPRECATION_MARKER in line:
        return Classification(
            pending_wait_target, WARNINGS, Issue(level=IssueLevel.WARNING, message=line)
        )

    return Classification(pending_wait_target)


def _close_detail_blocks(state: ClassifierState) -> ClassifierState:
    closed = state.closed_detail_blocks
    for idx, first in _unwind(state.open_detail_blocks):
        closed = _push(closed, (idx, first, state.detail_count))
    return replace(state, open_detail_blocks=None, closed_detail_blocks=closed)


def _collect_detail(state: ClassifierState, text: str) -> ClassifierState:
    """Record an indented line for the open detail blocks, or close them all.

    Open blocks always close together, so each one owns the slice of
    ``detail_lines`` between its opening and the shared close.
    """
    if state.open_detail_blocks is None:
        return state
    if not text.startswith(DETAIL_INDENT):
        return _close_detail_blocks(state)

    return replace(
        state,
        detail_lines=_push(state.detail_lines, text.strip()),
        detail_count=state.detail_count + 1,
    )


def step(state: ClassifierState, raw: str) -> ClassifierState:
    """Advance the fold by one raw log line."""
    text = clean_line(raw)
    # Detail lines are not consumed: they are still classified below
    state = _collect_detail(state, text)

    line = text.strip()
    if not line:
        return state

    result = classify_line(line, state.pending_wait_target)
    state = replace(state, pending_wait_target=result.pending_wait_target)
    if result.bucket is None:
        return state

    state = replace(state, **{result.bucket: _push(getattr(state, result.bucket), result.record)})
    if result.bucket == ERRORS:
        state = replace(state, error_count=state.error_count + 1)
    if result.opens_detail_block:
        block = (state.error_count - 1, state.detail_count)
        state = replace(state, open_detail_blocks=_push(state.open_detail_blocks, block))
    return state


def fold(texts: Iterable[str], initial: ClassifierState | None = None) -> ClassifierState:
    return reduce(step, texts, initial if initial is not None else ClassifierState())


def _longer(acc: BuildEvent, cur: BuildEvent) -> BuildEvent:
    if acc.duration_ms is None:
        return cur
    if cur.duration_ms is None:
        return acc
    return cur if cur.duration_ms > acc.duration_ms else acc


def summarize(build_events: list[BuildEvent]) -> dict:
    if not build_events:
        return {}

    longest = reduce(_longer, build_events)
    return {
        "eventCount": len(build_events),
        "longestBuildMs": longest.duration_ms,
        "longestTarget": longest.target,
    }


def _errors_with_routes(state: ClassifierState) -> list[Issue]:
    errors = _unwind(state.errors)
    if state.open_detail_blocks is None and state.closed_detail_blocks is None:
        return errors

    detail = _unwind(state.detail_lines)
    blocks = _unwind(state.closed_detail_blocks)
    blocks += [(idx, first, state.detail_count) for idx, first in _unwind(state.open_detail_blocks)]
    for idx, first, end in blocks:
        issue = errors[idx]
        errors[idx] = replace(issue, details={**issue.details, "routes": detail[first:end]})
    return errors


def to_metrics(state: ClassifierState) -> Metrics:
    events = _unwind(state.build_events)
    return Metrics(
        build_events=events,
        warnings=_unwind(state.warnings),
        errors=_errors_with_routes(state),
        notes=_unwind(state.notes),
        summary=summarize(events),
    )
