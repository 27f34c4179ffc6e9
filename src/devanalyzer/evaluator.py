"""
Evaluation: project-file snapshot, score, recommendations, LLM insight.

The deterministic part (score, level, recommendations, issues) is always
computed, even from zero log lines; the LLM step can only add to it.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from devanalyzer.config import LlmConfig
from devanalyzer.llm import generate_llm_insights
from devanalyzer.models import (
    EvaluationContext,
    EvaluationResult,
    FileSnapshot,
    Issue,
    LogTransformResult,
    Metrics,
    Thresholds,
)
from devanalyzer.prompt import create_prompt_bundle
from devanalyzer.recommendations import build_recommendations, build_summary
from devanalyzer.scoring import score as score_metrics

logger = logging.getLogger(__name__)

COMMON_CONFIGS = [
    "package.json",
    "tsconfig.json",
    "tailwind.config.js",
    "tailwind.config.ts",
    ".eslintrc.js",
    ".eslintrc.cjs",
    ".eslintrc.json",
]

# Framework-name substring -> config files worth checking
FRAMEWORK_CONFIG_MAP = {
    "next": ["next.config.js", "next.config.ts", "next.config.mjs", "next.config.cjs"],
    "vite": ["vite.config.ts", "vite.config.js", "vite.config.mjs", "vite.config.cjs"],
    "nuxt": ["nuxt.config.ts", "nuxt.config.js", "nuxt.config.mjs", "nuxt.config.cjs"],
    "gatsby": ["gatsby-config.js", "gatsby-config.ts"],
    "astro": ["astro.config.ts", "astro.config.js"],
}

MAX_FILE_SIZE_BYTES = 200 * 1024
MAX_FILE_CHARS = 40_000
TRUNCATION_MARKER = "\n...[truncated]"

ISSUE_PATH = re.compile(
    r"(?:\.|/)(?:[\w.-]+/(?:[\w.-]+/)*[\w.-]+\.\w+)|(?:src|app|pages)/[\w./-]+\.\w+",
    re.I | re.ASCII,
)


def resolve_config_candidates(framework: str, include: list[str] | None = None) -> list[str]:
    normalized = framework.lower()
    candidates = list(COMMON_CONFIGS)
    for key, files in FRAMEWORK_CONFIG_MAP.items():
        if key in normalized:
            candidates.extend(files)
    candidates.extend(include or [])
    return list(dict.fromkeys(candidates))


def read_project_file(root: Path, relative: str) -> FileSnapshot:
    resolved = (root / relative).resolve()
    if not resolved.is_relative_to(root):
        return FileSnapshot(relative, exists=False, reason="Path escapes project root")

    try:
        if not resolved.exists():
            return FileSnapshot(relative, exists=False, reason="File not found")
        if not resolved.is_file():
            return FileSnapshot(relative, exists=False, reason="Not a regular file")

        size = resolved.stat().st_size
        content = resolved.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        return FileSnapshot(relative, exists=False, reason=str(exc))

    if size > MAX_FILE_SIZE_BYTES:
        return FileSnapshot(
            relative,
            exists=True,
            content=content[:MAX_FILE_CHARS] + TRUNCATION_MARKER,
            reason=f"File truncated from {size} bytes",
        )
    return FileSnapshot(relative, exists=True, content=content)


def read_project_files(root: Path, paths: list[str]) -> list[FileSnapshot]:
    return [read_project_file(root, p) for p in dict.fromkeys(paths)]


def _normalize_issue_path(segment: str) -> str | None:
    cleaned = re.sub(r"^[-\s]+", "", segment)
    cleaned = re.sub(r"^[.:]+", "", cleaned)
    return cleaned.removeprefix("/") or None


def extract_paths_from_issues(issues: list[Issue]) -> list[str]:
    """File paths mentioned in issue messages and string detail values."""
    paths: dict[str, None] = {}
    for issue in issues:
        texts = [issue.message]
        if issue.details:
            texts += [v for v in issue.details.values() if isinstance(v, str)]
        for text in texts:
            for match in ISSUE_PATH.findall(text):
                normalized = _normalize_issue_path(match)
                if normalized:
                    paths[normalized] = None
    return list(paths)


def extract_related_paths(metrics: Metrics, existing: list[str]) -> list[str]:
    found = extract_paths_from_issues([*metrics.errors, *metrics.warnings])
    return [p for p in found if p not in existing]


def load_evaluation_context(
    transform: LogTransformResult,
    cwd: str | Path = ".",
    custom_prompt: str | None = None,
    include_configs: list[str] | None = None,
) -> EvaluationContext:
    root = Path(cwd).resolve()
    candidates = resolve_config_candidates(transform.framework, include_configs)
    related = extract_related_paths(transform.metrics, candidates)
    logger.debug("Checking %d config and %d related files", len(candidates), len(related))

    return EvaluationContext(
        cwd=str(root),
        transform=transform,
        prompt=create_prompt_bundle(transform, custom_prompt),
        config_files=read_project_files(root, candidates),
        related_files=read_project_files(root, related),
    )


def evaluate(
    context: EvaluationContext,
    thresholds: Thresholds | None = None,
    llm: LlmConfig | None = None,
) -> EvaluationResult:
    thresholds = thresholds or Thresholds()
    metrics = context.metrics

    score, level = score_metrics(metrics, thresholds)
    recommendations = build_recommendations(metrics, context.config_files, thresholds)

    return EvaluationResult(
        score=score,
        level=level,
        summary=build_summary(metrics, score),
        recommendations=recommendations,
        issues=[*metrics.errors, *metrics.warnings],
        context=context,
        llm=generate_llm_insights(context, recommendations, llm),
    )
