"""
Framework log parsers: turn captured dev-server lines into Metrics.

Each framework gets its own parser. Add new frameworks by subclassing
LogParser and appending to PARSERS; order is priority order.
"""

from __future__ import annotations

from typing import Iterable

from devanalyzer.classifier import ClassifierState, fold, step, to_metrics
from devanalyzer.models import LogLine, LogTransformResult, Metrics
from devanalyzer.patterns import NEXT_KEYWORD


class StreamingParser:
    """Feed lines as they arrive; ``result()`` matches a batch ``parse``.

    The base version just buffers and parses at the end.
    """

    def __init__(self, parser: LogParser, framework: str):
        self.parser = parser
        self.framework = framework
        self._logs: list[LogLine] = []

    def feed(self, entry: LogLine) -> None:
        self._logs.append(entry)

    def feed_all(self, entries: Iterable[LogLine]) -> None:
        for entry in entries:
            self.feed(entry)

    def result(self) -> LogTransformResult:
        return self.parser.parse(self.framework, self._logs)


class NextStreamingParser(StreamingParser):
    """Advances the classifier fold on every line instead of at the end."""

    def __init__(self, parser: LogParser, framework: str):
        super().__init__(parser, framework)
        self._state = ClassifierState()

    def feed(self, entry: LogLine) -> None:
        super().feed(entry)
        self._state = step(self._state, entry.text)

    def result(self) -> LogTransformResult:
        return LogTransformResult(
            framework=self.framework,
            metrics=to_metrics(self._state),
            raw_logs=list(self._logs),
        )


class LogParser:
    """Base parser. Handles nothing and extracts nothing."""

    keyword: str = ""

    def can_handle(self, framework: str) -> bool:
        return bool(self.keyword) and self.keyword in framework.lower()

    def parse(self, framework: str, logs: list[LogLine]) -> LogTransformResult:
        return LogTransformResult(framework=framework, metrics=Metrics(), raw_logs=list(logs))

    def stream(self, framework: str) -> StreamingParser:
        return StreamingParser(self, framework)


class NextLogParser(LogParser):
    """Parser for ``next dev`` output."""

    keyword = NEXT_KEYWORD

    def parse(self, framework: str, logs: list[LogLine]) -> LogTransformResult:
        state = fold(entry.text for entry in logs)
        return LogTransformResult(
            framework=framework,
            metrics=to_metrics(state),
            raw_logs=list(logs),
        )

    def stream(self, framework: str) -> StreamingParser:
        return NextStreamingParser(self, framework)


# Registry of parsers in priority order - extend as frameworks get support
PARSERS: list[LogParser] = [
    NextLogParser(),
    # NuxtLogParser(),
    # ViteLogParser(),
]

FALLBACK_PARSER = LogParser()


def get_parser(framework: str) -> LogParser:
    for parser in PARSERS:
        if parser.can_handle(framework):
            return parser
    return FALLBACK_PARSER


def transform_logs(framework: str, logs: list[LogLine]) -> LogTransformResult:
    """Parse ``logs`` with the first parser that handles ``framework``.

    Unsupported frameworks are not an error: the result carries empty
    metrics and the logs untouched.
    """
    return get_parser(framework).parse(framework, logs)
