"""Optional LLM insight via an OpenAI-compatible chat-completions endpoint."""

from __future__ import annotations

import logging

import requests

from devanalyzer.config import LlmConfig
from devanalyzer.errors import LlmError
from devanalyzer.models import EvaluationContext, LlmInsight, Recommendation
from devanalyzer.prompt import build_llm_prompt

logger = logging.getLogger(__name__)

PROVIDER = "openai"

SYSTEM_PROMPT = (
    "You are a senior frontend performance consultant. Based on the build log "
    "metrics and issue list provided, give at most 6 optimization suggestions, "
    "each with a concrete action item."
)


def get_headers(api_key):
    return {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {api_key}",
    }


def call_completion(config: LlmConfig, prompt: str) -> tuple[str, dict]:
    """POST ``prompt`` and return (trimmed content, raw payload).

    Raises:
        LlmError: on network failure, non-2xx status, or empty or malformed content.
    """
    body = {
        "model": config.model,
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ],
        "temperature": 0.2,
    }
    try:
        resp = requests.post(
            config.endpoint,
            headers=get_headers(config.api_key),
            json=body,
            timeout=config.timeout,
        )
    except requests.RequestException as exc:
        raise LlmError(f"LLM request failed: {exc}") from exc

    if not resp.ok:
        raise LlmError(f"LLM request failed with status {resp.status_code}")

    try:
        data = resp.json()
    except ValueError as exc:
        raise LlmError("LLM response is not JSON") from exc

    return _message_content(data), data


def _message_content(data) -> str:
    """``choices[0].message.content``, trimmed. Raises LlmError on any other shape."""
    choices = data.get("choices") if isinstance(data, dict) else None
    if not choices:
        raise LlmError("LLM response is empty")
    if not isinstance(choices, list) or not isinstance(choices[0], dict):
        raise LlmError("LLM response has an unexpected shape")

    message = choices[0].get("message")
    if message is None:
        raise LlmError("LLM response is empty")
    if not isinstance(message, dict):
        raise LlmError("LLM response has an unexpected shape")

    content = message.get("content")
    if content is not None and not isinstance(content, str):
        raise LlmError("LLM response has an unexpected shape")
    content = (content or "").strip()
    if not content:
        raise LlmError("LLM response is empty")
    return content


def generate_llm_insights(
    context: EvaluationContext,
    recommendations: list[Recommendation],
    config: LlmConfig | None,
) -> LlmInsight | None:
    """Ask the model for advice. Any failure yields None, never an exception."""
    if config is None or not config.is_configured:
        return None

    prompt = build_llm_prompt(context.prompt.combined, context.metrics, recommendations)
    try:
        summary, raw = call_completion(config, prompt)
    except LlmError as exc:
        logger.warning("%s", exc)
        return None

    return LlmInsight(summary=summary, provider=PROVIDER, model=config.model, raw=raw)
