"""Configuration system for redoc."""

from .loader import get_config_path, load_config
from .schema import (
    CerebrasConfig,
    GeminiConfig,
    GenerationConfig,
    GroqConfig,
    OllamaConfig,
    OutputConfig,
    RedocConfig,
    TaskProviders,
)

__all__ = [
    "RedocConfig",
    "GroqConfig",
    "GeminiConfig",
    "CerebrasConfig",
    "OllamaConfig",
    "GenerationConfig",
    "TaskProviders",
    "OutputConfig",
    "load_config",
    "get_config_path",
]
