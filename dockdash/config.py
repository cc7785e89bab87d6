"""Configuration loader for dockdash.

Reads an optional YAML configuration file, applies environment overrides and
validates the result using Pydantic models.
"""

import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from dockdash.models import GatewayConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "config.yml"

# environment variable -> config field
ENV_OVERRIDES = {
    "HOST": "host",
    "PORT": "port",
    "DOCKDASH_MODE": "mode",
    "DOCKER_HOST": "docker_base_url",
    "DOCKDASH_LOG_LEVEL": "log_level",
}


def _env_overrides() -> dict:
    overrides = {
        field: os.environ[var] for var, field in ENV_OVERRIDES.items() if os.environ.get(var)
    }
    # NODE_ENV=production is accepted for parity with the dashboard's tooling
    if "mode" not in overrides and os.environ.get("NODE_ENV") == "production":
        overrides["mode"] = "production"
    return overrides


def load_config(config_path: Optional[str] = None) -> GatewayConfig:
    """Load and validate configuration from YAML file and environment.

    Args:
        config_path: Path to config file. If None, reads from DOCKDASH_CONFIG_FILE
            environment variable or defaults to 'config.yml' in current directory.
            A missing default file is not an error; defaults are used.

    Returns:
        Validated GatewayConfig object.

    Raises:
        FileNotFoundError: If an explicitly requested config file does not exist.
        ValidationError: If config does not match expected schema.
        yaml.YAMLError: If config file is not valid YAML.
    """
    explicit = config_path is not None or "DOCKDASH_CONFIG_FILE" in os.environ
    if config_path is None:
        config_path = os.getenv("DOCKDASH_CONFIG_FILE", DEFAULT_CONFIG_FILE)

    config_file = Path(config_path)

    data: dict = {}
    if config_file.exists():
        logger.info(f"Loading configuration from {config_path}")
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.error(f"Failed to parse YAML: {e}")
            raise
    elif explicit:
        raise FileNotFoundError(f"Configuration file not found: {config_path}")
    else:
        logger.info(f"No configuration file at {config_path}, using defaults")

    data.update(_env_overrides())

    try:
        config = GatewayConfig(**data)
    except ValidationError as e:
        logger.error(f"Configuration validation failed: {e}")
        raise

    logger.info(f"Configuration loaded (mode={config.mode}, port={config.port})")
    return config
