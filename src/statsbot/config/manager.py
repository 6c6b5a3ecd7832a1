"""
Configuration management and caching.

This module provides the main configuration loading interface. The loaded
configuration is cached so every component sees the same value;
`reload_config` re-reads the file for the reload signal and only replaces
the cached value when loading succeeds.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from ..models.config import Configuration
from ..validation import ConfigError, ConfigParseError, ErrorSeverity, handle_config_error
from .loader import load_toml_file
from .validators import validate_configuration

logger = logging.getLogger(__name__)

# --- Cached configuration ---

_CONFIG: Optional[Configuration] = None

# Path of the configuration file; set by the CLI before the first get_config()
_CONFIG_FILE_PATH: Optional[Path] = None


def set_config_path(config_path: Union[str, Path]) -> None:
    """
    Set the configuration file path and drop any cached configuration.

    Args:
        config_path: Path to the TOML configuration file
    """
    global _CONFIG_FILE_PATH, _CONFIG
    _CONFIG_FILE_PATH = Path(config_path)
    _CONFIG = None
    logger.info(f"Configuration path set to: {_CONFIG_FILE_PATH}")


def clear_config_cache() -> None:
    """Clear the cached configuration, forcing a reload on next access."""
    global _CONFIG
    _CONFIG = None
    logger.debug("Configuration cache cleared")


def load_configuration(config_path: Union[str, Path]) -> Configuration:
    """
    Load and validate a configuration file without touching the cache.

    Args:
        config_path: Path to the TOML configuration file

    Returns:
        Validated Configuration

    Raises:
        ConfigReadError: If the file cannot be read
        ConfigParseError: If the file is not valid TOML or fails validation
    """
    config_path = Path(config_path)
    data = load_toml_file(config_path, "configuration file")
    try:
        config = validate_configuration(data)
    except ConfigParseError as e:
        handle_config_error(
            error=e,
            context=f"validating {config_path}",
            severity=ErrorSeverity.ERROR,
            reraise=False,
            logger=logger
        )
        raise

    logger.info(
        f"Loaded configuration for {config.session.server}:{config.session.port} "
        f"with {len(config.servers)} servers to poll"
    )
    return config


def _require_path() -> Path:
    if _CONFIG_FILE_PATH is None:
        raise ConfigError("No configuration path set; call set_config_path() first")
    return _CONFIG_FILE_PATH


def get_config() -> Configuration:
    """
    Get the current configuration, loading it on first access.

    Returns:
        The cached Configuration

    Raises:
        ConfigError: If no path is set or the file cannot be loaded
    """
    global _CONFIG
    if _CONFIG is None:
        _CONFIG = load_configuration(_require_path())
    return _CONFIG


def reload_config() -> Configuration:
    """
    Re-read the configuration file.

    The cached configuration is replaced only when the new file loads and
    validates; on failure the previous configuration stays cached.

    Returns:
        The freshly loaded Configuration

    Raises:
        ConfigError: If the file cannot be loaded
    """
    global _CONFIG
    config = load_configuration(_require_path())
    _CONFIG = config
    return config


def is_config_loaded() -> bool:
    """Check if a configuration has been loaded and cached."""
    return _CONFIG is not None
