"""
Validation and error handling for the statsbot package.

This module provides the exception taxonomy, input validation and error
handling with consistent error reporting across the application.
"""

from .exceptions import (
    ConfigError,
    ConfigParseError,
    ConfigReadError,
    ErrorSeverity,
    ListenError,
    MalformedReport,
    ProtocolError,
    StatsbotError,
    ValidationError,
    handle_cli_error,
    handle_config_error,
    handle_error,
)

from .validators import (
    validate_boolean,
    validate_listen_address,
    validate_nickname,
    validate_non_empty_string,
    validate_port,
    validate_protocol_string,
    validate_positive_integer,
    validate_server_list,
    validate_server_name,
)

__all__ = [
    # Exceptions
    "StatsbotError",
    "ConfigError",
    "ConfigReadError",
    "ConfigParseError",
    "ValidationError",
    "ProtocolError",
    "MalformedReport",
    "ListenError",
    # Error handling
    "ErrorSeverity",
    "handle_error",
    "handle_config_error",
    "handle_cli_error",
    # Validators
    "validate_boolean",
    "validate_listen_address",
    "validate_nickname",
    "validate_non_empty_string",
    "validate_port",
    "validate_protocol_string",
    "validate_positive_integer",
    "validate_server_list",
    "validate_server_name",
]
