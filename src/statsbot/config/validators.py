"""
Configuration validation utilities.

This module turns the raw TOML tables into validated configuration
dataclasses, one function per table.
"""

import logging
import re
from typing import Any, Dict, Optional

from ..models.config import Configuration, ExporterConfig, OperCredentials, SessionConfig
from ..validation import (
    ValidationError,
    validate_boolean,
    validate_listen_address,
    validate_nickname,
    validate_port,
    validate_protocol_string,
    validate_server_list,
)

logger = logging.getLogger(__name__)

DEFAULT_LISTEN_ADDRESS = "127.0.0.1:9187"

_KNOWN_TABLES = {"irc", "oper", "polling", "exporter"}

_METRIC_PREFIX_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def _require_table(data: Dict[str, Any], name: str, required: bool = True) -> Dict[str, Any]:
    table = data.get(name)
    if table is None:
        if required:
            raise ValidationError(f"Missing [{name}] section", field_name=name)
        return {}
    if not isinstance(table, dict):
        raise ValidationError(f"[{name}] must be a table", field_name=name, value=table)
    return table


def _optional_string(table: Dict[str, Any], key: str, field_name: str) -> Optional[str]:
    value = table.get(key)
    if value is None or value == "":
        return None
    return validate_protocol_string(value, field_name=field_name)


def validate_session_config(irc_data: Dict[str, Any]) -> SessionConfig:
    """
    Validate the `[irc]` table.

    Args:
        irc_data: Raw `[irc]` table

    Returns:
        Validated SessionConfig

    Raises:
        ValidationError: If a field is missing or invalid
    """
    server = validate_protocol_string(irc_data.get("server"), field_name="irc.server")
    nickname = validate_nickname(irc_data.get("nickname"), field_name="irc.nickname")
    port = validate_port(irc_data.get("port", 6667), field_name="irc.port")
    use_tls = validate_boolean(irc_data.get("use_tls", False), field_name="irc.use_tls")

    username = _optional_string(irc_data, "username", "irc.username")
    if username is not None and " " in username:
        raise ValidationError(
            "irc.username must not contain spaces",
            field_name="irc.username",
            value=username
        )

    return SessionConfig(
        server=server,
        nickname=nickname,
        port=port,
        use_tls=use_tls,
        username=username,
        realname=_optional_string(irc_data, "realname", "irc.realname"),
        password=_optional_string(irc_data, "password", "irc.password"),
    )


def validate_oper_config(oper_data: Dict[str, Any]) -> Optional[OperCredentials]:
    """
    Validate the optional `[oper]` table.

    Returns:
        OperCredentials, or None when no credentials are configured

    Raises:
        ValidationError: If only one of name and password is set
    """
    name = _optional_string(oper_data, "name", "oper.name")
    password = _optional_string(oper_data, "password", "oper.password")

    if name is None and password is None:
        return None
    if name is None or password is None:
        raise ValidationError(
            "oper.name and oper.password must be set together",
            field_name="oper"
        )
    if " " in name or " " in password:
        raise ValidationError(
            "oper.name and oper.password must not contain spaces",
            field_name="oper"
        )
    return OperCredentials(name=name, password=password)


def validate_exporter_config(exporter_data: Dict[str, Any]) -> ExporterConfig:
    """
    Validate the `[exporter]` table.

    Raises:
        ValidationError: If the listen address or metric prefix is invalid
    """
    host, port = validate_listen_address(
        exporter_data.get("listen", DEFAULT_LISTEN_ADDRESS),
        field_name="exporter.listen",
    )

    metric_prefix = exporter_data.get("metric_prefix", "")
    if not isinstance(metric_prefix, str):
        raise ValidationError(
            "exporter.metric_prefix must be a string",
            field_name="exporter.metric_prefix",
            value=metric_prefix
        )
    if metric_prefix and not _METRIC_PREFIX_RE.fullmatch(metric_prefix):
        raise ValidationError(
            f"exporter.metric_prefix must be a valid metric name prefix: {metric_prefix}",
            field_name="exporter.metric_prefix",
            value=metric_prefix
        )

    return ExporterConfig(host=host, port=port, metric_prefix=metric_prefix)


def validate_configuration(data: Dict[str, Any]) -> Configuration:
    """
    Validate a whole configuration document.

    Args:
        data: Parsed TOML document

    Returns:
        Validated Configuration

    Raises:
        ValidationError: If any table fails validation
    """
    unknown = set(data) - _KNOWN_TABLES
    if unknown:
        logger.warning(f"Ignoring unknown configuration sections: {sorted(unknown)}")

    session = validate_session_config(_require_table(data, "irc"))
    oper = validate_oper_config(_require_table(data, "oper", required=False))
    polling = _require_table(data, "polling")
    servers = validate_server_list(polling.get("servers"), field_name="polling.servers")
    exporter = validate_exporter_config(_require_table(data, "exporter", required=False))

    if not servers:
        logger.warning(
            "polling.servers is empty; stats requests will be unaddressed "
            "and their reports cannot be attributed to a server"
        )

    return Configuration(
        session=session,
        servers=tuple(servers),
        exporter=exporter,
        oper=oper,
    )
