"""
Exception taxonomy and error handling helpers.

This module defines the exceptions raised across statsbot and the small set
of helpers used to log an error at a given severity and optionally re-raise
it. Only ProtocolError and ListenError are meant to cross task boundaries;
everything else is absorbed where it is detected.
"""

import logging
import sys
from enum import Enum
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """Severity levels for error handling."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class StatsbotError(Exception):
    """Base class for all statsbot errors."""


class ConfigError(StatsbotError):
    """Configuration could not be obtained."""


class ConfigReadError(ConfigError):
    """The configuration file could not be read."""


class ConfigParseError(ConfigError):
    """The configuration file was read but its content is invalid."""


class ValidationError(ConfigParseError):
    """
    Exception raised when a single configuration value fails validation.

    Attributes:
        field_name: Dotted name of the offending field, if known
        value: The rejected value
        severity: Severity used when the error is logged
    """

    def __init__(self, message: str, field_name: Optional[str] = None,
                 value: Any = None, severity: ErrorSeverity = ErrorSeverity.ERROR):
        super().__init__(message)
        self.field_name = field_name
        self.value = value
        self.severity = severity


class ProtocolError(StatsbotError):
    """The session with the polling target failed; fatal to that session only."""


class MalformedReport(StatsbotError):
    """
    A stats report did not match the fixed report grammar.

    Carries no partially parsed data, only where and why parsing stopped.
    """

    def __init__(self, reason: str, line_number: Optional[int] = None):
        location = f" (line {line_number})" if line_number is not None else ""
        super().__init__(f"Malformed stats report{location}: {reason}")
        self.reason = reason
        self.line_number = line_number


class ListenError(StatsbotError):
    """The HTTP exporter could not bind its listening address."""


def handle_error(
    error: Exception,
    context: str,
    severity: Union[ErrorSeverity, str] = ErrorSeverity.ERROR,
    reraise: bool = True,
    logger: Optional[logging.Logger] = None
) -> None:
    """
    Handle errors with consistent logging and optional re-raising.

    Args:
        error: The exception that occurred
        context: Context description of where the error occurred
        severity: Severity level for logging
        reraise: Whether to re-raise the exception after logging
        logger: Logger instance to use (defaults to module logger)
    """
    effective_logger = logger or globals()['logger']

    error_msg = f"Error in {context}: {error}"

    if isinstance(severity, str):
        severity_str = severity.lower()
    else:
        severity_str = severity.value

    if severity_str == "debug":
        effective_logger.debug(error_msg, exc_info=True)
    elif severity_str == "info":
        effective_logger.info(error_msg)
    elif severity_str == "warning":
        effective_logger.warning(error_msg)
    elif severity_str == "error":
        effective_logger.error(error_msg)
    elif severity_str == "critical":
        effective_logger.critical(error_msg, exc_info=True)

    if reraise:
        raise error


def handle_config_error(error: Exception, context: str, **kwargs) -> None:
    """Handle configuration-related errors."""
    handle_error(error, f"config {context}", **kwargs)


def handle_cli_error(error: Exception, context: str, **kwargs) -> None:
    """Handle CLI-related errors by logging and exiting the process."""
    exit_code = kwargs.pop('exit_code', 1)

    severity = kwargs.pop('severity', ErrorSeverity.ERROR)
    handle_error(error, f"CLI {context}", severity=severity, reraise=False, **kwargs)

    sys.exit(exit_code)
