"""Prompt text handed to the completion endpoint."""

from __future__ import annotations

from devanalyzer.models import LogTransformResult, Metrics, PromptBundle, Recommendation
from devanalyzer.recommendations import format_ms

PROMPT_HEADER = (
    "You are Dev Analyzer, an assistant that reviews frontend build diagnostics "
    "and configuration to surface actionable insights."
)

MAX_PROMPT_WARNINGS = 5


def build_base_prompt(transform: LogTransformResult, additional_context: str | None = None) -> str:
    """Header, counts, every error, the first few warnings, then extra context."""
    metrics = transform.metrics
    longest = metrics.longest_build_ms

    summary_lines = [
        f"Framework: {transform.framework or 'Unknown'}",
        f"Errors detected: {len(metrics.errors)}",
        f"Warnings detected: {len(metrics.warnings)}",
        f"Build events recorded: {len(metrics.build_events)}",
    ]
    if longest:
        summary_lines.append(f"Longest build duration: {format_ms(longest)} ms")

    sections = [PROMPT_HEADER, "", "\n".join(summary_lines)]

    if metrics.errors:
        sections += ["", "Key errors:", *(f"- {i.message}" for i in metrics.errors)]

    if metrics.warnings:
        shown = metrics.warnings[:MAX_PROMPT_WARNINGS]
        sections += ["", "Key warnings:", *(f"- {i.message}" for i in shown)]
        if len(metrics.warnings) > MAX_PROMPT_WARNINGS:
            sections.append(f"- ...(total {len(metrics.warnings)} warnings)")

    if additional_context:
        sections += ["", additional_context.strip()]

    return "\n".join(sections)


def merge_prompts(base: str, custom: str | None = None) -> str:
    if not custom:
        return base
    return f"{base}\n\nUser instructions:\n{custom.strip()}"


def create_prompt_bundle(transform: LogTransformResult, custom: str | None = None) -> PromptBundle:
    base = build_base_prompt(transform)
    return PromptBundle(base=base, custom=custom, combined=merge_prompts(base, custom))


def _event_line(event) -> str:
    duration = "N/A" if event.duration_ms is None else format_ms(event.duration_ms)
    modules = "N/A" if event.modules is None else event.modules
    return f"- {event.target} | {event.type.value} | {duration} ms | modules: {modules}"


def build_llm_prompt(
    combined: str,
    metrics: Metrics,
    recommendations: list[Recommendation],
) -> str:
    """Full user message: the prompt bundle plus build events and issues."""
    issues = "\n".join(
        f"- [{i.level.value.upper()}] {i.message}" for i in [*metrics.errors, *metrics.warnings]
    )
    parts = [
        combined,
        "",
        "Build events:",
        "\n".join(_event_line(e) for e in metrics.build_events),
        "",
        "Detected issues:",
        issues or "- none",
        "",
        f"Existing recommendations: {len(recommendations)}" if recommendations else "",
    ]
    return "\n".join(p for p in parts if p)
