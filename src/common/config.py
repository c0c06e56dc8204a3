# src/common/config.py

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from src.common.exceptions import ConfigError
from src.common.logging import logger
from src.common.provisioning import DEFAULT_STREAM_TIMESTAMP_FORMAT
from src.common.records import Level

# Path(__file__).resolve().parent.parent.parent gives us the project root.
project_root = Path(__file__).resolve().parent.parent.parent

_config_cache: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class HandlerSettings:
    level: Level = Level.DEBUG
    stream_name: str = "log-stream"
    stream_timestamp_format: str = DEFAULT_STREAM_TIMESTAMP_FORMAT


def load_config() -> Dict[str, Any]:
    """
    Loads the application configuration from a YAML file based on the APP_ENV
    environment variable.

    Purpose:
        To provide a centralized way of loading environment-specific settings.
        The function determines the environment (e.g., 'dev', 'prod') from the
        `APP_ENV` OS environment variable, finds the corresponding
        `config/<env>.yaml` file, and loads it. The loaded configuration is
        cached to avoid repeated file I/O in the same Lambda execution context.

    Returns:
        Dict[str, Any]: A dictionary containing the application configuration.

    Raises:
        FileNotFoundError: If the required configuration file does not exist.
        ValueError: If the APP_ENV environment variable is not set.
    """
    global _config_cache
    if _config_cache:
        logger.debug("Returning cached configuration.")
        return _config_cache

    env = os.environ.get("APP_ENV")
    if not env:
        raise ValueError("APP_ENV environment variable is not set.")

    logger.info(f"Loading configuration for environment: {env}")

    config_path = project_root / "config" / f"{env}.yaml"

    if not config_path.is_file():
        logger.error(f"Configuration file not found at path: {config_path}")
        raise FileNotFoundError(f"Config file not found for env '{env}'")

    with open(config_path, "r") as f:
        try:
            config_data = yaml.safe_load(f) or {}
            _config_cache = config_data
            logger.info("Successfully loaded and cached configuration.")
            return config_data
        except yaml.YAMLError as e:
            logger.error(f"Error parsing YAML file {config_path}: {e}")
            raise


def handler_settings(app_config: Dict[str, Any]) -> HandlerSettings:
    """
    Reads the `handler` section of the app config into typed settings.

    Missing keys fall back to the HandlerSettings defaults. An unknown level
    name is a misconfiguration, not something to silently coerce.

    Raises:
        ConfigError: If the section or one of its values is malformed.
    """
    section = app_config.get("handler") or {}
    if not isinstance(section, dict):
        raise ConfigError("'handler' config section must be a mapping")

    defaults = HandlerSettings()

    level_name = str(section.get("level", defaults.level.name)).upper()
    if level_name not in Level.__members__:
        raise ConfigError(f"Unknown handler level '{section.get('level')}'")

    stream_name = section.get("stream_name", defaults.stream_name)
    if not isinstance(stream_name, str) or not stream_name:
        raise ConfigError("handler.stream_name must be a non-empty string")

    timestamp_format = section.get(
        "stream_timestamp_format", defaults.stream_timestamp_format
    )
    if not isinstance(timestamp_format, str) or not timestamp_format:
        raise ConfigError("handler.stream_timestamp_format must be a non-empty string")

    return HandlerSettings(
        level=Level[level_name],
        stream_name=stream_name,
        stream_timestamp_format=timestamp_format,
    )
