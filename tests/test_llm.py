"""Tests for the optional LLM step. No network: requests.post is patched."""

import logging
from types import SimpleNamespace
from unittest.mock import patch

import pytest
import requests

from devanalyzer.config import LlmConfig
from devanalyzer.errors import LlmError
from devanalyzer.evaluator import load_evaluation_context
from devanalyzer.llm import PROVIDER, SYSTEM_PROMPT, call_completion, generate_llm_insights, get_headers
from devanalyzer.parsers import transform_logs


def fake_response(status=200, payload=None, json_error=False):
    def _json():
        if json_error:
            raise ValueError("not json")
        return payload

    return SimpleNamespace(ok=200 <= status < 300, status_code=status, json=_json)


def completion(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


@pytest.fixture
def llm_config():
    return LlmConfig(model="gpt-test", endpoint="http://llm.local/v1/chat/completions", api_key="sk-test")


@pytest.fixture
def context(next_project, next_log_lines):
    transform = transform_logs("Next.js", next_log_lines)
    return load_evaluation_context(transform, cwd=next_project, custom_prompt="Be brief")


class TestCallCompletion:
    def test_request_shape(self, llm_config):
        with patch("devanalyzer.llm.requests.post", return_value=fake_response(payload=completion(" ok "))) as post:
            content, raw = call_completion(llm_config, "PROMPT")

        assert content == "ok"
        assert raw == completion(" ok ")
        args, kwargs = post.call_args
        assert args[0] == "http://llm.local/v1/chat/completions"
        assert kwargs["headers"] == get_headers("sk-test")
        assert kwargs["json"]["model"] == "gpt-test"
        assert kwargs["json"]["temperature"] == 0.2
        assert kwargs["json"]["messages"] == [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": "PROMPT"},
        ]
        assert kwargs["timeout"] == llm_config.timeout

    def test_http_error(self, llm_config):
        with patch("devanalyzer.llm.requests.post", return_value=fake_response(status=500, payload={})):
            with pytest.raises(LlmError, match="500"):
                call_completion(llm_config, "PROMPT")

    def test_network_error(self, llm_config):
        with patch("devanalyzer.llm.requests.post", side_effect=requests.ConnectionError("refused")):
            with pytest.raises(LlmError, match="refused"):
                call_completion(llm_config, "PROMPT")

    def test_non_json_body(self, llm_config):
        with patch("devanalyzer.llm.requests.post", return_value=fake_response(json_error=True)):
            with pytest.raises(LlmError, match="not JSON"):
                call_completion(llm_config, "PROMPT")

    @pytest.mark.parametrize("payload", [{}, {"choices": []}, completion("   "), completion(None)])
    def test_empty_content(self, llm_config, payload):
        with patch("devanalyzer.llm.requests.post", return_value=fake_response(payload=payload)):
            with pytest.raises(LlmError, match="empty"):
                call_completion(llm_config, "PROMPT")

    @pytest.mark.parametrize(
        "payload",
        [
            ["not", "a", "dict"],
            {"choices": {"0": {}}},
            {"choices": "text"},
            {"choices": ["oops"]},
            {"choices": [{"message": "oops"}]},
            {"choices": [{"message": {"content": 42}}]},
            {"choices": [{"message": {"content": ["a", "b"]}}]},
        ],
    )
    def test_malformed_payload(self, llm_config, payload):
        with patch("devanalyzer.llm.requests.post", return_value=fake_response(payload=payload)):
            with pytest.raises(LlmError):
                call_completion(llm_config, "PROMPT")


class TestGenerateInsights:
    def test_success(self, context, llm_config):
        with patch("devanalyzer.llm.requests.post", return_value=fake_response(payload=completion("Use SWC."))) as post:
            insight = generate_llm_insights(context, [], llm_config)

        assert insight.summary == "Use SWC."
        assert insight.provider == PROVIDER
        assert insight.model == "gpt-test"
        user_message = post.call_args.kwargs["json"]["messages"][1]["content"]
        assert "User instructions:\nBe brief" in user_message
        assert "Build events:" in user_message

    def test_unconfigured_skips_request(self, context):
        with patch("devanalyzer.llm.requests.post") as post:
            assert generate_llm_insights(context, [], LlmConfig()) is None
            assert generate_llm_insights(context, [], None) is None
        post.assert_not_called()

    def test_failure_logged_and_swallowed(self, context, llm_config, caplog):
        with patch("devanalyzer.llm.requests.post", side_effect=requests.Timeout("slow")):
            with caplog.at_level(logging.WARNING, logger="devanalyzer.llm"):
                assert generate_llm_insights(context, [], llm_config) is None
        assert "LLM request failed" in caplog.text

    @pytest.mark.parametrize(
        "payload",
        [{"choices": [{"message": "oops"}]}, {"choices": {"first": {}}}, {"choices": [{"message": {"content": 1}}]}],
    )
    def test_malformed_payload_logged_and_swallowed(self, context, llm_config, caplog, payload):
        with patch("devanalyzer.llm.requests.post", return_value=fake_response(payload=payload)):
            with caplog.at_level(logging.WARNING, logger="devanalyzer.llm"):
                assert generate_llm_insights(context, [], llm_config) is None
        assert "unexpected shape" in caplog.text
