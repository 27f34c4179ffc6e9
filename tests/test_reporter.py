"""Tests for report files under .dev-analyzer/."""

import json
import logging
from dataclasses import replace

from devanalyzer.models import LlmInsight
from devanalyzer.reporter import (
    DEFAULT_REPORT_DIR,
    build_json_payload,
    write_json_report,
    write_markdown_report,
    write_text_report,
)


class TestJsonPayload:
    def test_core_keys(self, sample_result):
        payload = build_json_payload(sample_result)

        assert set(payload) == {
            "generatedAt",
            "score",
            "level",
            "summary",
            "recommendations",
            "issues",
            "framework",
            "metrics",
            "prompt",
        }
        assert payload["score"] == 70
        assert payload["level"] == "Good"
        assert payload["framework"] == "Next.js"
        assert payload["prompt"]["custom"] == "Keep it short"
        assert payload["recommendations"][0]["level"] == "critical"
        assert payload["metrics"]["summary"]["longestTarget"] == "/dashboard"
        assert payload["metrics"]["buildEvents"][0] == {
            "target": "build",
            "durationMs": 1234,
            "modules": 320,
            "type": "initial",
        }

    def test_optional_sections(self, sample_result):
        payload = build_json_payload(
            sample_result,
            include_config_files=True,
            include_related_files=True,
            include_raw_logs=True,
        )
        assert payload["configFiles"][0]["path"] == "package.json"
        assert payload["relatedFiles"][0] == {
            "path": "pages/index.tsx",
            "exists": False,
            "reason": "File not found",
        }
        assert payload["rawLogs"][1]["text"].startswith("- event compiled client and server")
        assert payload["rawLogs"][1]["source"] == "stdout"

    def test_llm_section(self, sample_result):
        result = replace(sample_result, llm=LlmInsight("Tip", "openai", "gpt-test", raw={"id": 1}))
        assert build_json_payload(result)["llm"] == {"summary": "Tip", "provider": "openai", "model": "gpt-test"}


class TestWriteReports:
    def test_default_locations(self, sample_result, next_project):
        json_path = write_json_report(sample_result)
        md_path = write_markdown_report(sample_result)
        txt_path = write_text_report(sample_result)

        report_dir = (next_project / DEFAULT_REPORT_DIR).resolve()
        assert json_path == report_dir / "dev-analyzer-report.json"
        assert md_path == report_dir / "report.md"
        assert txt_path == report_dir / "report.txt"

        assert json.loads(json_path.read_text(encoding="utf-8"))["score"] == 70
        assert md_path.read_text(encoding="utf-8").startswith("# Dev Analyzer Report")
        assert txt_path.read_text(encoding="utf-8").startswith("Dev Analyzer Report")

    def test_custom_relative_path(self, sample_result, next_project):
        path = write_json_report(sample_result, output_path="out/nested/report.json", include_raw_logs=True)
        assert path == (next_project / "out" / "nested" / "report.json").resolve()
        assert "rawLogs" in json.loads(path.read_text(encoding="utf-8"))

    def test_absolute_path(self, sample_result, tmp_path_factory):
        target = tmp_path_factory.mktemp("elsewhere") / "report.md"
        assert write_markdown_report(sample_result, output_path=target) == target.resolve()
        assert target.exists()

    def test_write_logged(self, sample_result, caplog):
        with caplog.at_level(logging.INFO, logger="devanalyzer.reporter"):
            path = write_text_report(sample_result)
        assert f"Text report written to {path}" in caplog.text
