"""
Human-readable rendering of evaluation results: terminal text and Markdown.
File writing lives in reporter.py.
"""

from __future__ import annotations

import click

from devanalyzer.models import EvaluationResult, FileSnapshot
from devanalyzer.patterns import IssueLevel, Level
from devanalyzer.recommendations import format_ms

_LEVEL_COLOR = {
    Level.EXCELLENT: "green",
    Level.GOOD: "cyan",
    Level.AVERAGE: "yellow",
    Level.POOR: "red",
}

_REC_COLOR = {
    IssueLevel.INFO: "cyan",
    IssueLevel.WARNING: "yellow",
    IssueLevel.CRITICAL: "red",
}

_STATUS_MD = {True: "✅ Found", False: "⚠️ Missing"}

MAX_ISSUES_SHOWN = 10


def format_report(
    result: EvaluationResult,
    use_color: bool = False,
    verbose: bool = False,
    indent: int = 2,
) -> str:
    """Format an EvaluationResult into a terminal report."""
    ctx = result.context
    metrics = ctx.metrics
    pad = " " * indent

    def style(text: str, **kw) -> str:
        return click.style(text, **kw) if use_color else text

    def bold(text: str) -> str:
        return style(text, bold=True)

    def dim(text: str) -> str:
        return style(text, dim=True)

    score_text = style(f"{result.score}/100", fg=_LEVEL_COLOR.get(result.level, "green"))
    lines: list[str] = [
        bold("Dev Analyzer Report"),
        f"{bold('Framework')}: {ctx.framework or 'Unknown'}",
        f"{bold('Score')}: {score_text} ({result.level.value})",
        f"{bold('Summary')}: {result.summary}",
    ]

    if metrics.build_events:
        build = f"Build events: {len(metrics.build_events)}"
        if metrics.longest_build_ms:
            build += f" · Longest build: {format_ms(metrics.longest_build_ms)} ms"
        lines.append(f"{bold('Build')}: {build}")

    if result.recommendations:
        lines += ["", bold("Recommendations:")]
        for rec in result.recommendations:
            tag = style(f"[{rec.level.value.upper()}]", fg=_REC_COLOR.get(rec.level, "cyan"))
            lines.append(f"{pad}{tag} {rec.message}")

    if result.llm:
        lines += ["", bold("LLM Insights:")]
        lines += [f"{pad}{line}" for line in result.llm.summary.splitlines()]

    def _files(title: str, files: list[FileSnapshot]) -> None:
        lines.extend(["", bold(title)])
        for f in files:
            status = style(
                ("found" if f.exists else "missing").ljust(8),
                fg="green" if f.exists else "yellow",
            )
            reason = dim(f" ({f.reason})") if f.reason else ""
            lines.append(f"{pad}{status} {f.path}{reason}")

    if verbose:
        _files("Config files:", ctx.config_files)
        if ctx.related_files:
            _files("Related files:", ctx.related_files)

    if result.issues:
        lines += ["", bold("Issues:")]
        shown = result.issues if verbose else result.issues[:MAX_ISSUES_SHOWN]
        for issue in shown:
            color = "red" if issue.level == IssueLevel.ERROR else "yellow"
            lines.append(f"{pad}{style(f'[{issue.level.value}]', fg=color)} {issue.message}")
        hidden = len(result.issues) - len(shown)
        if hidden > 0:
            lines.append(f"{pad}{dim(f'… {hidden} more')}")

    return "\n".join(lines)


def format_markdown(
    result: EvaluationResult,
    include_config: bool = False,
    include_related: bool = False,
) -> str:
    ctx = result.context
    metrics = ctx.metrics
    lines: list[str] = [
        "# Dev Analyzer Report",
        "",
        f"- **Framework**: {ctx.framework or 'Unknown'}",
        f"- **Score**: {result.score}/100 ({result.level.value})",
        f"- **Summary**: {result.summary}",
        "",
    ]

    if metrics.build_events:
        lines += ["## Build Metrics", "", f"- Total build events: {len(metrics.build_events)}"]
        if metrics.longest_build_ms:
            lines.append(f"- Longest build: {format_ms(metrics.longest_build_ms)} ms")
        lines.append("")

    if result.recommendations:
        lines += ["## Recommendations", ""]
        lines += [f"- **{r.level.value.upper()}**: {r.message}" for r in result.recommendations]
        lines.append("")

    if result.llm:
        lines += ["## LLM Insights", "", result.llm.summary, ""]

    if result.issues:
        lines += ["## Issues", ""]
        lines += [f"- [{i.level.value.upper()}] {i.message}" for i in result.issues]
        lines.append("")

    def _section(title: str, files: list[FileSnapshot]) -> None:
        lines.extend([f"## {title}", ""])
        for f in files:
            reason = f" ({f.reason})" if f.reason else ""
            lines.append(f"- {_STATUS_MD[f.exists]} `{f.path}`{reason}")
        lines.append("")

    if include_config and ctx.config_files:
        _section("Config Files", ctx.config_files)
    if include_related and ctx.related_files:
        _section("Related Files", ctx.related_files)

    return "\n".join(lines)
