"""Configuration parsing from ``.dev-analyzer.yml`` and the environment."""

from __future__ import annotations

import logging
import math
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from devanalyzer.errors import ConfigError
from devanalyzer.models import Thresholds

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".dev-analyzer.yml"

DEFAULT_LLM_MODEL = "gpt-4o-mini"
DEFAULT_LLM_ENDPOINT = "https://api.openai.com/v1/chat/completions"

_ENV_VAR_RE = re.compile(r"\$\{(\w+)\}")

# YAML key -> Thresholds field
_THRESHOLD_KEYS = {
    "warningPenalty": "warning_penalty",
    "errorPenalty": "error_penalty",
    "slowBuildMs": "slow_build_ms",
}

_FLAG_WORDS = {
    "true": True, "yes": True, "on": True, "1": True,
    "false": False, "no": False, "off": False, "0": False,
}


def _resolve_env_vars(value: str) -> str:
    """Replace ``${VAR_NAME}`` placeholders with environment variable values."""

    def _replace(match: re.Match[str]) -> str:
        var = match.group(1)
        resolved = os.environ.get(var)
        if resolved is None:
            logger.warning("Environment variable %s is not set (referenced in config)", var)
            return ""
        return resolved

    return _ENV_VAR_RE.sub(_replace, value)


def _resolve(value: Any) -> Any:
    if isinstance(value, str):
        return _resolve_env_vars(value)
    if isinstance(value, dict):
        return {k: _resolve(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_resolve(item) for item in value]
    return value


@dataclass
class LlmConfig:
    """Completion endpoint settings."""

    model: str = DEFAULT_LLM_MODEL
    """Model identifier sent in the request body."""

    endpoint: str = DEFAULT_LLM_ENDPOINT
    """Chat-completions URL."""

    api_key: str = ""
    """Bearer token; empty means the LLM step is skipped."""

    timeout: float = 60.0
    """Request timeout in seconds."""

    enabled: bool = True

    @property
    def is_configured(self) -> bool:
        return self.enabled and bool(self.api_key)


@dataclass
class AnalyzerConfig:
    thresholds: Thresholds = field(default_factory=Thresholds)
    llm: LlmConfig = field(default_factory=LlmConfig)
    extra_configs: list[str] = field(default_factory=list)
    """Additional project files to check for presence."""


def _parse_number(name: str, value: Any) -> float:
    """Finite number >= 0; numeric strings are accepted (they come from ${ENV} placeholders)."""
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ConfigError(f"{name} must be a number, got {value!r}")
    try:
        number = float(value)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {value!r}") from exc
    if not math.isfinite(number):
        raise ConfigError(f"{name} must be a finite number, got {value!r}")
    if number < 0:
        raise ConfigError(f"{name} must be >= 0, got {number}")
    return number


def _parse_flag(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in _FLAG_WORDS:
        return _FLAG_WORDS[value.strip().lower()]
    raise ConfigError(f"{name} must be true or false, got {value!r}")


def parse_thresholds(raw: Any) -> Thresholds:
    """Build Thresholds from a ``thresholds:`` mapping; unknown keys are ignored."""
    if raw is None:
        return Thresholds()
    if not isinstance(raw, dict):
        raise ConfigError("'thresholds' must be a mapping")

    values: dict[str, float] = {}
    for key, attr in _THRESHOLD_KEYS.items():
        if key in raw:
            values[attr] = _parse_number(f"thresholds.{key}", raw[key])

    return Thresholds(**values)


def load_config(root: str | Path, env: dict[str, str] | None = None) -> AnalyzerConfig:
    """Load ``.dev-analyzer.yml`` from ``root``.

    Falls back to ``OPENAI_API_KEY``, ``OPENAI_MODEL`` and
    ``OPENAI_BASE_URL`` for LLM settings the file does not set.
    """
    env = os.environ if env is None else env
    path = Path(root) / CONFIG_FILENAME

    raw: dict[str, Any] = {}
    if path.is_file():
        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ConfigError(f"Could not parse {path}: {exc}") from exc
        if isinstance(parsed, dict):
            raw = _resolve(parsed)
        elif parsed is not None:
            raise ConfigError(f"{path} must contain a mapping at the top level")
        logger.debug("Loaded config from %s", path)

    llm_raw = raw.get("llm") or {}
    if not isinstance(llm_raw, dict):
        llm_raw = {}

    timeout = _parse_number("llm.timeout", llm_raw.get("timeout", 60.0))
    if timeout == 0:
        raise ConfigError("llm.timeout must be > 0")

    llm = LlmConfig(
        model=str(llm_raw.get("model") or env.get("OPENAI_MODEL") or DEFAULT_LLM_MODEL),
        endpoint=str(
            llm_raw.get("endpoint") or env.get("OPENAI_BASE_URL") or DEFAULT_LLM_ENDPOINT
        ),
        api_key=str(llm_raw.get("api_key") or env.get("OPENAI_API_KEY") or ""),
        timeout=timeout,
        enabled=_parse_flag("llm.enabled", llm_raw.get("enabled", True)),
    )

    extras = raw.get("configs") or []
    if not isinstance(extras, list):
        raise ConfigError("'configs' must be a list of paths")

    return AnalyzerConfig(
        thresholds=parse_thresholds(raw.get("thresholds")),
        llm=llm,
        extra_configs=[str(p) for p in extras],
    )
