"""Configuration for binreload.

Provides duration parsing and layered settings (defaults, BINRELOAD_*
environment variables, CLI overrides) validated with pydantic.
"""

from ._duration import parse_duration
from ._load import ENV_PREFIX, deep_merge, load_settings, parse_env_vars
from ._models import LogFormat, LoggingConfig, LogLevel, Settings

__all__ = [
    "ENV_PREFIX",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "Settings",
    "deep_merge",
    "load_settings",
    "parse_duration",
    "parse_env_vars",
]
