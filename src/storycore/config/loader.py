# src/storycore/config/loader.py
"""Load ``StoryCoreConfig`` from a TOML file, a dictionary, or the environment."""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..exceptions import ConfigError
from .models import StoryCoreConfig

logger = logging.getLogger(__name__)

CONFIG_FILE_ENV_VAR = "STORYCORE_CONFIG_FILE"
SECTION = "storycore"


def load_config(
    config_dict: dict[str, Any] | None = None,
    config_path: str | Path | None = None,
) -> StoryCoreConfig:
    """
    Load StoryCore configuration from a dictionary or TOML file.

    When neither argument is given, the file named by the
    ``STORYCORE_CONFIG_FILE`` environment variable is read if set; otherwise
    all defaults apply.

    Args:
        config_dict: Pre-parsed configuration dictionary. If it has a
            ``"storycore"`` key, that section is used.  Values here are
            merged over the file contents, section by section.
        config_path: Path to a TOML file.  Its ``[storycore]`` table is used
            when present, otherwise the whole document.

    Returns:
        Validated StoryCoreConfig with defaults for unspecified settings.

    Raises:
        ConfigError: If the file is missing, unparsable, or fails validation.

    Examples:
        >>> load_config().context.default_max_tokens
        500

        >>> load_config(config_dict={"storycore": {"memory": {"max_entries_per_session": 5}}}
        ... ).memory.max_entries_per_session
        5
    """
    if config_path is None and config_dict is None:
        env_path = os.environ.get(CONFIG_FILE_ENV_VAR)
        if env_path:
            config_path = env_path

    data: dict[str, Any] = {}

    if config_path is not None:
        path = Path(config_path).expanduser()
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        try:
            with open(path, "rb") as f:
                raw = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {path}: {e}") from e
        data = raw.get(SECTION, raw)
        logger.debug("Loaded configuration file %s", path)

    if config_dict is not None:
        overrides = config_dict.get(SECTION, config_dict)
        data = _merge_sections(data, overrides)

    try:
        return StoryCoreConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid StoryCore configuration: {e}") from e


def _merge_sections(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge_sections(merged[key], value)
        else:
            merged[key] = value
    return merged
