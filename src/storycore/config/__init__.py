# src/storycore/config/__init__.py
"""
Configuration module for the StoryCore library.

Settings are described by Pydantic models and can be loaded from a TOML
file (``[storycore]`` table), a dictionary, or the file named by the
``STORYCORE_CONFIG_FILE`` environment variable.
"""

from .loader import CONFIG_FILE_ENV_VAR, load_config
from .models import (
    ContextInjectionConfig,
    LoggingSettings,
    MemoryStoreConfig,
    PostFilterConfig,
    RelevanceWeights,
    StoryCoreConfig,
)

__all__ = [
    "CONFIG_FILE_ENV_VAR",
    "ContextInjectionConfig",
    "LoggingSettings",
    "MemoryStoreConfig",
    "PostFilterConfig",
    "RelevanceWeights",
    "StoryCoreConfig",
    "load_config",
]
