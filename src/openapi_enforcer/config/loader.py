"""Configuration loader for openapi-enforcer.

Reads an :class:`EnforcerConfig` from a YAML file. The file holds the same keys
as the model (``enforce``, ``validate``, ``populate``, ``request``, ``version``,
``maxDepth``, ``validateAll``), either at the top level or under a ``config``
section.
"""

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import EnforcerConfig

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "OPENAPI_ENFORCER_CONFIG"
DEFAULT_CONFIG_NAME = "enforcer.yml"


def load_config(config_path: Path | str | None = None) -> EnforcerConfig:
    """Load the enforcer configuration from a YAML file.

    Args:
        config_path: Optional path to the configuration file.
                    If not provided, looks for:
                    1. OPENAPI_ENFORCER_CONFIG environment variable
                    2. ./enforcer.yml

    Returns:
        EnforcerConfig, the defaults when no file is found

    Raises:
        FileNotFoundError: If an explicitly requested config file doesn't exist
        ValueError: If the file can't be parsed or holds an invalid configuration
    """
    if config_path is None:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            config_path = Path(env_path)
        else:
            candidate = Path.cwd() / DEFAULT_CONFIG_NAME
            if not candidate.exists():
                logger.info("No enforcer config file found, using default configuration")
                return EnforcerConfig()
            config_path = candidate

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Enforcer config file not found at {config_path}")

    logger.debug(f"Loading enforcer config from: {config_path}")

    try:
        with open(config_path, encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Failed to parse YAML config file {config_path}: {e}") from e

    if not raw_config:
        logger.info("Empty enforcer config file, using default configuration")
        return EnforcerConfig()

    if not isinstance(raw_config, dict):
        raise ValueError(f"Enforcer config file {config_path} must contain a mapping")

    section = raw_config.get("config", raw_config)

    try:
        return EnforcerConfig.model_validate(section)
    except ValidationError as e:
        raise ValueError(f"Invalid enforcer config in {config_path}: {e}") from e
