"""Exception types raised by dev-analyzer collaborators.

The parser, scorer and recommendation builder never raise; these are for
the I/O edges (dev process, config file, LLM call).
"""


class DevAnalyzerError(Exception):
    """Base class for all dev-analyzer errors."""


class CollectorError(DevAnalyzerError):
    """The dev command could not be launched."""


class ConfigError(DevAnalyzerError):
    """The ``.dev-analyzer.yml`` file holds an invalid value."""


class LlmError(DevAnalyzerError):
    """The completion endpoint failed or returned nothing usable."""
