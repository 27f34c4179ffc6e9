"""Shared fixtures: log-line builders and sample Next.js output."""

from __future__ import annotations

import json

import pytest

from devanalyzer.models import LogLine
from devanalyzer.patterns import LogSource


def make_lines(texts, source=LogSource.STDOUT):
    return [LogLine(source=source, text=t, sequence=i) for i, t in enumerate(texts)]


NEXT_DEV_LOG = """\
- ready started server on 0.0.0.0:3000, url: http://localhost:3000
- event compiled client and server successfully in 1234 ms (320 modules)
- wait compiling /dashboard (client and server)...
- event compiled successfully in 2.5s (1024 modules)
- warn Fast Refresh had to perform a full reload due to a runtime error.
Duplicate page detected. pages/index.tsx and app/page.tsx resolve to /
warn - You have enabled experimental feature (serverActions) in next.config.js.
Lockfile was successfully patched, please run "npm install" to ensure @next/swc dependencies are downloaded
"""


@pytest.fixture
def next_log_lines():
    return make_lines(NEXT_DEV_LOG.splitlines())


@pytest.fixture
def next_project(tmp_path):
    """A minimal Next.js project root."""
    (tmp_path / "package.json").write_text(
        json.dumps({"name": "web", "dependencies": {"next": "^14.1.0", "react": "18.2.0"}}),
        encoding="utf-8",
    )
    (tmp_path / "package-lock.json").write_text("{}", encoding="utf-8")
    return tmp_path


@pytest.fixture
def sample_result(next_project, next_log_lines):
    """EvaluationResult for NEXT_DEV_LOG in ``next_project``, no LLM."""
    from devanalyzer.evaluator import evaluate, load_evaluation_context
    from devanalyzer.parsers import transform_logs

    transform = transform_logs("Next.js", next_log_lines)
    return evaluate(load_evaluation_context(transform, cwd=next_project, custom_prompt="Keep it short"))
