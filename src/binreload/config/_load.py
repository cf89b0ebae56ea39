# pyright: reportAny=false, reportExplicitAny=false
"""Layered settings loading.

Settings are merged from three sources, lowest precedence first:
built-in defaults, BINRELOAD_* environment variables, CLI overrides.
"""

import os
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from binreload.exceptions import ConfigError

from ._models import Settings

ENV_PREFIX = "BINRELOAD_"

# Variables read for other purposes, not settings keys
_RESERVED_ENV = frozenset({"DEBUG"})


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two settings dictionaries.

    Merges `override` into `base`, returning a new dictionary. Neither input
    is modified. Nested dictionaries are merged recursively; any other value
    in `override` replaces the one in `base`.

    Args:
        base: Base settings (lower precedence).
        override: Override settings (higher precedence).

    Returns:
        Merged settings dictionary.
    """
    result: dict[str, Any] = dict(base)
    for key, override_val in override.items():
        base_val = result.get(key)
        if isinstance(base_val, dict) and isinstance(override_val, dict):
            result[key] = deep_merge(base_val, override_val)
        else:
            result[key] = override_val
    return result


def set_nested_key(data: dict[str, Any], dotted_key: str, value: Any) -> None:
    """Set `value` at a dotted path, creating intermediate dictionaries."""
    parts = dotted_key.split(".")
    current = data
    for part in parts[:-1]:
        child = current.get(part)
        if not isinstance(child, dict):
            child = {}
            current[part] = child
        current = child
    current[parts[-1]] = value


def parse_env_vars(
    environ: Mapping[str, str] | None = None,
    prefix: str = ENV_PREFIX,
) -> dict[str, Any]:
    """Parse environment variables into a settings dictionary.

    Args:
        environ: Environment mapping (defaults to os.environ).
        prefix: Environment variable prefix.

    Returns:
        Dictionary of raw string values with nested structure.

    Environment variable naming:
        - Add prefix (BINRELOAD_)
        - Convert to uppercase
        - Replace dots with double underscores
        - Example: logging.level -> BINRELOAD_LOGGING__LEVEL
    """
    source = os.environ if environ is None else environ
    result: dict[str, Any] = {}

    for key, value in source.items():
        if not key.startswith(prefix):
            continue

        settings_key = key[len(prefix) :]
        if not settings_key or settings_key in _RESERVED_ENV:
            continue

        set_nested_key(result, settings_key.replace("__", ".").lower(), value)

    return result


def load_settings(
    cli_overrides: Mapping[str, Any] | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Load settings from defaults, environment and CLI overrides.

    Args:
        cli_overrides: Values given on the command line. Keys may be dotted
            (e.g. "logging.level"); None values are skipped.
        environ: Environment mapping (defaults to os.environ).

    Returns:
        The validated Settings.

    Raises:
        ConfigError: If any value fails validation.
    """
    merged = parse_env_vars(environ)

    if cli_overrides:
        cli: dict[str, Any] = {}
        for key, value in cli_overrides.items():
            if value is not None:
                set_nested_key(cli, key, value)
        merged = deep_merge(merged, cli)

    try:
        return Settings.model_validate(merged)
    except ValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error["loc"])
        msg = f"Invalid setting '{field}': {error['msg']}"
        raise ConfigError(msg, field=field) from e
