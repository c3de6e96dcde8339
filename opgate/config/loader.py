"""Configuration loading for opgate clients.

Sources are merged in order, later ones winning:
1. Explicit JSON file, or ./.opgate/config.json when no path is given
2. Environment variables (OPGATE_URL, OPGATE_TOKEN)
3. Keyword overrides passed by the caller (e.g. CLI flags)
"""

import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from opgate.config.schema import ClientOptions
from opgate.core.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".opgate"
CONFIG_FILE_NAME = "config.json"

ENV_URL = "OPGATE_URL"
ENV_TOKEN = "OPGATE_TOKEN"

_ENV_FIELDS = {
    ENV_URL: "url",
    ENV_TOKEN: "token",
}


def load_json_file(path: Path) -> dict[str, Any]:
    """Load and parse a JSON config file.

    Returns:
        Parsed JSON as a dict. Returns empty dict if file is empty.

    Raises:
        ConfigError: If the file can't be read, contains invalid JSON,
            or contains non-dict JSON.
    """
    resolved = path.resolve()

    try:
        content = resolved.read_text(encoding="utf-8-sig")
    except OSError as e:
        raise ConfigError(f"Failed to read config file {path}: {e}") from e

    content = content.strip()
    if not content:
        return {}

    try:
        result = json.loads(content)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(result, dict):
        raise ConfigError(f"Expected object in {path}, got {type(result).__name__}")

    return result


def load_options(
    path: Path | None = None,
    env: Mapping[str, str] | None = None,
    cwd: Path | None = None,
    **overrides: Any,
) -> ClientOptions:
    """Build ClientOptions from file, environment and overrides.

    Args:
        path: Explicit config file. Must exist if given.
        env: Environment mapping (defaults to os.environ).
        cwd: Directory searched for .opgate/config.json when path is None.
        **overrides: Field values taking precedence over everything else.
            None values are ignored.

    Returns:
        Validated ClientOptions.

    Raises:
        ConfigError: If the file is unreadable or the merged values are invalid.
    """
    merged: dict[str, Any] = {}

    if path is not None:
        if not path.is_file():
            raise ConfigError(f"Config file not found: {path}")
        merged.update(load_json_file(path))
        logger.debug("Loaded config file: %s", path)
    else:
        local = (cwd or Path.cwd()) / CONFIG_DIR_NAME / CONFIG_FILE_NAME
        if local.is_file():
            merged.update(load_json_file(local))
            logger.debug("Loaded config file: %s", local)

    environ = os.environ if env is None else env
    for var, field in _ENV_FIELDS.items():
        value = environ.get(var)
        if value:
            merged[field] = value
            logger.debug("Config %s taken from $%s", field, var)

    merged.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return ClientOptions.model_validate(merged)
    except ValidationError as e:
        raise ConfigError(f"Config validation failed: {e}") from e
