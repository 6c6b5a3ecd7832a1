"""
Configuration management for the statsbot package.

This module provides a clean interface for loading, validating, and accessing
configuration data from a TOML file.
"""

# Main configuration interface
from .manager import (
    clear_config_cache,
    get_config,
    is_config_loaded,
    load_configuration,
    reload_config,
    set_config_path,
)

# For advanced usage - direct access to loader and validators
from .loader import load_toml_file
from .validators import (
    validate_configuration,
    validate_exporter_config,
    validate_oper_config,
    validate_session_config,
)

__all__ = [
    # Main interface
    "get_config",
    "set_config_path",
    "clear_config_cache",
    "reload_config",
    "load_configuration",
    "is_config_loaded",
    # Advanced interface
    "load_toml_file",
    "validate_configuration",
    "validate_session_config",
    "validate_oper_config",
    "validate_exporter_config",
]
