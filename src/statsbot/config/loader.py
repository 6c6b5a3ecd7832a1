"""
Configuration file loading utilities.

This module handles the low-level reading and TOML decoding of the
configuration file. Read failures and decode failures raise distinct
exceptions so callers can tell a missing file from a broken one.
"""

import logging
import tomllib
from pathlib import Path
from typing import Any, Dict

from ..validation import ConfigParseError, ConfigReadError, ErrorSeverity, handle_config_error

logger = logging.getLogger(__name__)


def load_toml_file(file_path: Path, description: str = "configuration file") -> Dict[str, Any]:
    """
    Load and parse a TOML file with error handling.

    Args:
        file_path: Path to the TOML file to load
        description: Human-readable description for error messages

    Returns:
        Parsed TOML data as a dictionary

    Raises:
        ConfigReadError: If the file is missing or cannot be read
        ConfigParseError: If the file is not valid TOML
    """
    logger.info(f"Loading {description} from: {file_path}")

    try:
        with open(file_path, "rb") as f:
            return tomllib.load(f)
    except OSError as e:
        error = ConfigReadError(f"Cannot read {description} '{file_path}': {e}")
        handle_config_error(
            error=error,
            context=f"reading {description}",
            severity=ErrorSeverity.ERROR,
            reraise=False,
            logger=logger
        )
        raise error from e
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
        error = ConfigParseError(f"Malformed {description} '{file_path}': {e}")
        handle_config_error(
            error=error,
            context=f"parsing {description}",
            severity=ErrorSeverity.ERROR,
            reraise=False,
            logger=logger
        )
        raise error from e
