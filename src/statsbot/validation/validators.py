"""
Value validation functions used by the configuration layer.

Every validator returns the normalized value or raises ValidationError
naming the offending field.
"""

import re
from typing import Any, List, Optional, Tuple

from .exceptions import ValidationError

# RFC 2812 nickname characters, relaxed on length as most networks are
_NICKNAME_RE = re.compile(r'[A-Za-z\[\]\\`_^{|}][A-Za-z0-9\[\]\\`_^{|}-]*')

# Characters that would break a `server="..."` label or an IRC parameter
_UNSAFE_LABEL_CHARS = set('"\\\n\r\t ,\0')

# Characters that would end or truncate an IRC protocol line
_LINE_BREAKING_CHARS = set('\r\n\0')


def validate_positive_integer(
    value: Any,
    min_value: int = 1,
    max_value: Optional[int] = None,
    field_name: str = "value"
) -> int:
    """
    Validate that a value is an integer within bounds.

    Args:
        value: Value to validate
        min_value: Minimum allowed value (inclusive)
        max_value: Maximum allowed value (inclusive), None for no limit
        field_name: Name of the field being validated

    Returns:
        Validated integer value

    Raises:
        ValidationError: If validation fails
    """
    if isinstance(value, bool):
        raise ValidationError(
            f"{field_name} must be a valid integer, got {value}",
            field_name=field_name,
            value=value
        )
    try:
        int_value = int(value)
    except (ValueError, TypeError):
        raise ValidationError(
            f"{field_name} must be a valid integer, got {value}",
            field_name=field_name,
            value=value
        )
    if int_value < min_value:
        raise ValidationError(
            f"{field_name} must be >= {min_value}, got {int_value}",
            field_name=field_name,
            value=value
        )
    if max_value is not None and int_value > max_value:
        raise ValidationError(
            f"{field_name} must be <= {max_value}, got {int_value}",
            field_name=field_name,
            value=value
        )
    return int_value


def validate_port(value: Any, field_name: str = "port") -> int:
    """Validate a TCP port number."""
    return validate_positive_integer(value, min_value=1, max_value=65535, field_name=field_name)


def validate_boolean(value: Any, field_name: str = "value") -> bool:
    """Validate that a value is a real boolean (TOML true/false)."""
    if not isinstance(value, bool):
        raise ValidationError(
            f"{field_name} must be a boolean, got {value!r}",
            field_name=field_name,
            value=value
        )
    return value


def validate_non_empty_string(value: Any, field_name: str = "value") -> str:
    """Validate that a value is a non-blank string and return it stripped."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(
            f"{field_name} must be a non-empty string",
            field_name=field_name,
            value=value
        )
    return value.strip()


def validate_protocol_string(value: Any, field_name: str = "value") -> str:
    """
    Validate a non-empty string that is sent verbatim inside an IRC line.

    Raises:
        ValidationError: If the string is blank or contains CR, LF or NUL
    """
    text = validate_non_empty_string(value, field_name=field_name)
    if set(text) & _LINE_BREAKING_CHARS:
        raise ValidationError(
            f"{field_name} must not contain line breaks or NUL characters",
            field_name=field_name,
            value=value
        )
    return text


def validate_nickname(value: Any, field_name: str = "nickname") -> str:
    """
    Validate an IRC nickname.

    Args:
        value: Nickname to validate
        field_name: Name of the field being validated

    Returns:
        Validated nickname

    Raises:
        ValidationError: If the nickname contains characters IRC does not allow
    """
    nickname = validate_non_empty_string(value, field_name=field_name)
    if not _NICKNAME_RE.fullmatch(nickname):
        raise ValidationError(
            f"{field_name} is not a valid IRC nickname: {nickname}",
            field_name=field_name,
            value=value
        )
    return nickname


def validate_server_name(value: Any, field_name: str = "server") -> str:
    """
    Validate a peer identifier so it can be used verbatim as a metric label.

    Raises:
        ValidationError: If the name is empty or contains quoting, escaping,
            whitespace or separator characters
    """
    name = validate_non_empty_string(value, field_name=field_name)
    bad = sorted(set(name) & _UNSAFE_LABEL_CHARS)
    if bad:
        raise ValidationError(
            f"{field_name} contains characters not allowed in a label: {bad!r}",
            field_name=field_name,
            value=value
        )
    return name


def validate_server_list(value: Any, field_name: str = "servers") -> List[str]:
    """
    Validate the ordered list of peers to poll.

    Order is preserved. Duplicates are rejected because the round-robin
    cursor would poll the same peer twice per cycle.
    """
    if not isinstance(value, list):
        raise ValidationError(
            f"{field_name} must be a list of server names",
            field_name=field_name,
            value=value
        )
    servers: List[str] = []
    for i, item in enumerate(value):
        name = validate_server_name(item, field_name=f"{field_name}[{i}]")
        if name in servers:
            raise ValidationError(
                f"{field_name} must be unique, '{name}' is listed twice",
                field_name=field_name,
                value=value
            )
        servers.append(name)
    return servers


def validate_listen_address(value: Any, field_name: str = "listen") -> Tuple[str, int]:
    """
    Validate a `host:port` listen address.

    IPv6 hosts must be bracketed (`[::1]:9187`).

    Returns:
        Tuple of (host, port)
    """
    address = validate_non_empty_string(value, field_name=field_name)
    if address.startswith("["):
        host, sep, rest = address[1:].partition("]")
        if not sep or not rest.startswith(":"):
            raise ValidationError(
                f"{field_name} must look like [host]:port, got {address}",
                field_name=field_name,
                value=value
            )
        port_str = rest[1:]
    else:
        host, sep, port_str = address.rpartition(":")
        if not sep or ":" in host:
            raise ValidationError(
                f"{field_name} must look like host:port, got {address}",
                field_name=field_name,
                value=value
            )
    if not host:
        raise ValidationError(
            f"{field_name} is missing a host, got {address}",
            field_name=field_name,
            value=value
        )
    return host, validate_port(port_str, field_name=field_name)
