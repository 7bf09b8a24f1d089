# redoc/config/loader.py
"""
Configuration loading with auto-creation of defaults.

A project-local .redoc.yaml wins over the per-user config file, which lives
in the platformdirs config directory. Credentials found in the environment
override the file so keys never have to be written to disk.
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from platformdirs import user_config_path
from pydantic import ValidationError

from redoc.ai.errors import ConfigError

from .schema import RedocConfig

logger = logging.getLogger(__name__)

PROJECT_CONFIG_NAME = ".redoc.yaml"
SUPPORTED_LANGUAGES = ("en", "pt-BR", "es")

# env var -> (section, key); section None means top-level
_ENV_OVERRIDES: list[tuple[str, str | None, str]] = [
    ("GROQ_API_KEY", "groq", "api_key"),
    ("GOOGLE_API_KEY", "gemini", "api_key"),
    ("GEMINI_API_KEY", "gemini", "api_key"),
    ("CEREBRAS_API_KEY", "cerebras", "api_key"),
    ("OLLAMA_HOST", "ollama", "base_url"),
    ("REDOC_LANGUAGE", None, "language"),
]


def get_config_path(project_root: Path | None = None) -> Path:
    """Get path to config file: project-local if present, else the user config dir."""
    root = project_root or Path.cwd()
    local = root / PROJECT_CONFIG_NAME
    if local.exists():
        return local
    config_dir = user_config_path("redoc", ensure_exists=True)
    return config_dir / "config.yaml"


def apply_env_overrides(data: dict[str, Any], environ: dict[str, str] | None = None) -> dict[str, Any]:
    """Return a copy of raw config data with environment overrides applied."""
    env = os.environ if environ is None else environ
    merged = dict(data)
    for var, section, key in _ENV_OVERRIDES:
        value = env.get(var)
        if not value:
            continue
        if var == "REDOC_LANGUAGE" and value not in SUPPORTED_LANGUAGES:
            logger.warning(f"Ignoring unsupported REDOC_LANGUAGE={value!r}")
            continue
        if section is None:
            merged[key] = value
            continue
        sub = merged.get(section)
        sub = dict(sub) if isinstance(sub, dict) else {}
        sub[key] = value
        merged[section] = sub
    return merged


def load_config(path: Path | None = None, environ: dict[str, str] | None = None) -> RedocConfig:
    """
    Load configuration from YAML file.

    If the config file doesn't exist, creates it with defaults.
    Returns validated Pydantic model.

    Raises:
        ConfigError: If the file is not valid YAML or fails validation
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        default_config = RedocConfig()
        config_dict = default_config.model_dump(mode="json", exclude={"generation": {"providers"}})

        config_path.parent.mkdir(parents=True, exist_ok=True)
        with config_path.open("w", encoding="utf-8") as f:
            yaml.safe_dump(config_dict, f, default_flow_style=False, sort_keys=False)

        logger.info(f"Created default config at {config_path}")
        data: dict[str, Any] = config_dict
    else:
        try:
            with config_path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config root must be a mapping: {config_path}")

    try:
        config = RedocConfig(**apply_env_overrides(data, environ))
    except ValidationError as e:
        raise ConfigError(f"Invalid config {config_path}: {e}") from e

    logger.info(f"Loaded config from {config_path}: ai_provider={config.ai_provider}")
    return config
