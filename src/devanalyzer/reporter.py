"""Report files: JSON payload, Markdown and plain text under ``.dev-analyzer/``."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from devanalyzer.formatter import format_markdown, format_report
from devanalyzer.models import EvaluationResult

logger = logging.getLogger(__name__)

DEFAULT_REPORT_DIR = ".dev-analyzer"
DEFAULT_JSON_NAME = "dev-analyzer-report.json"
DEFAULT_MARKDOWN_NAME = "report.md"
DEFAULT_TEXT_NAME = "report.txt"


def build_json_payload(
    result: EvaluationResult,
    include_config_files: bool = False,
    include_related_files: bool = False,
    include_raw_logs: bool = False,
) -> dict[str, Any]:
    ctx = result.context
    payload: dict[str, Any] = {
        "generatedAt": datetime.now(timezone.utc).isoformat(),
        "score": result.score,
        "level": result.level.value,
        "summary": result.summary,
        "recommendations": [r.to_dict() for r in result.recommendations],
        "issues": [i.to_dict() for i in result.issues],
        "framework": ctx.framework,
        "metrics": ctx.metrics.to_dict(),
        "prompt": {"base": ctx.prompt.base, "custom": ctx.prompt.custom},
    }

    if include_config_files:
        payload["configFiles"] = [f.to_dict() for f in ctx.config_files]
    if include_related_files:
        payload["relatedFiles"] = [f.to_dict() for f in ctx.related_files]
    if include_raw_logs:
        payload["rawLogs"] = [entry.to_dict() for entry in ctx.transform.raw_logs]
    if result.llm:
        payload["llm"] = {
            "summary": result.llm.summary,
            "provider": result.llm.provider,
            "model": result.llm.model,
        }

    return payload


def _output_path(result: EvaluationResult, output_path: str | Path | None, default: str) -> Path:
    root = Path(result.context.cwd)
    return (root / (output_path or Path(DEFAULT_REPORT_DIR) / default)).resolve()


def _write(path: Path, content: str, kind: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    logger.info("%s report written to %s", kind, path)
    return path


def write_json_report(
    result: EvaluationResult,
    output_path: str | Path | None = None,
    include_config_files: bool = False,
    include_related_files: bool = False,
    include_raw_logs: bool = False,
    indent: int | None = 2,
) -> Path:
    payload = build_json_payload(
        result,
        include_config_files=include_config_files,
        include_related_files=include_related_files,
        include_raw_logs=include_raw_logs,
    )
    content = json.dumps(payload, indent=indent, ensure_ascii=False, default=str)
    return _write(_output_path(result, output_path, DEFAULT_JSON_NAME), content, "JSON")


def write_markdown_report(
    result: EvaluationResult,
    output_path: str | Path | None = None,
    include_config: bool = False,
    include_related: bool = False,
) -> Path:
    content = format_markdown(result, include_config=include_config, include_related=include_related)
    return _write(_output_path(result, output_path, DEFAULT_MARKDOWN_NAME), content, "Markdown")


def write_text_report(
    result: EvaluationResult,
    output_path: str | Path | None = None,
    verbose: bool = False,
) -> Path:
    content = format_report(result, use_color=False, verbose=verbose)
    return _write(_output_path(result, output_path, DEFAULT_TEXT_NAME), content, "Text")
