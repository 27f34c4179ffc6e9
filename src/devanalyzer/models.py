"""Data types shared by the parser, evaluator and reporters."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from devanalyzer.patterns import BuildType, IssueLevel, Level, LogSource


@dataclass(frozen=True)
class LogLine:
    """One line captured from the dev process, in arrival order."""
    source: LogSource
    text: str
    sequence: int = 0
    captured_at: float = 0.0  # epoch seconds

    def to_dict(self) -> dict:
        return {
            "source": self.source.value,
            "text": self.text,
            "sequence": self.sequence,
            "capturedAt": self.captured_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> LogLine:
        return cls(
            source=LogSource(data.get("source", "stdout")),
            text=str(data.get("text", "")),
            sequence=int(data.get("sequence", 0)),
            captured_at=float(data.get("capturedAt", 0.0)),
        )


@dataclass(frozen=True)
class Issue:
    """A classified diagnostic. Recommendations share this shape."""
    level: IssueLevel
    message: str
    details: dict[str, Any] | None = None
    occurrences: int | None = None

    def to_dict(self) -> dict:
        data: dict[str, Any] = {"level": self.level.value, "message": self.message}
        if self.details is not None:
            data["details"] = self.details
        if self.occurrences is not None:
            data["occurrences"] = self.occurrences
        return data


Recommendation = Issue


@dataclass(frozen=True)
class BuildEvent:
    target: str
    duration_ms: float | None
    modules: int | None
    type: BuildType

    def to_dict(self) -> dict:
        return {
            "target": self.target,
            "durationMs": self.duration_ms,
            "modules": self.modules,
            "type": self.type.value,
        }


@dataclass(frozen=True)
class Metrics:
    build_events: list[BuildEvent] = field(default_factory=list)
    warnings: list[Issue] = field(default_factory=list)
    errors: list[Issue] = field(default_factory=list)
    notes: list[Issue] = field(default_factory=list)
    summary: dict[str, Any] = field(default_factory=dict)

    @property
    def longest_build_ms(self) -> float:
        """Longest recorded duration, 0 when there is none."""
        return self.summary.get("longestBuildMs") or 0

    def to_dict(self) -> dict:
        return {
            "buildEvents": [e.to_dict() for e in self.build_events],
            "warnings": [w.to_dict() for w in self.warnings],
            "errors": [e.to_dict() for e in self.errors],
            "notes": [n.to_dict() for n in self.notes],
            "summary": dict(self.summary),
        }


@dataclass(frozen=True)
class LogTransformResult:
    framework: str
    metrics: Metrics
    raw_logs: list[LogLine]


@dataclass(frozen=True)
class Thresholds:
    warning_penalty: float = 5
    error_penalty: float = 20
    slow_build_ms: float = 30_000


@dataclass(frozen=True)
class FileSnapshot:
    """Presence (and optionally content) of a project file."""
    path: str
    exists: bool
    content: str | None = None
    reason: str | None = None

    def to_dict(self) -> dict:
        data: dict[str, Any] = {"path": self.path, "exists": self.exists}
        if self.content is not None:
            data["content"] = self.content
        if self.reason is not None:
            data["reason"] = self.reason
        return data


@dataclass(frozen=True)
class LlmInsight:
    summary: str
    provider: str
    model: str
    raw: Any = None


@dataclass(frozen=True)
class PromptBundle:
    base: str
    custom: str | None
    combined: str


@dataclass(frozen=True)
class EvaluationContext:
    cwd: str
    transform: LogTransformResult
    prompt: PromptBundle
    config_files: list[FileSnapshot] = field(default_factory=list)
    related_files: list[FileSnapshot] = field(default_factory=list)

    @property
    def framework(self) -> str:
        return self.transform.framework

    @property
    def metrics(self) -> Metrics:
        return self.transform.metrics


@dataclass(frozen=True)
class EvaluationResult:
    score: int
    level: Level
    summary: str
    recommendations: list[Recommendation]
    issues: list[Issue]
    context: EvaluationContext
    llm: LlmInsight | None = None
