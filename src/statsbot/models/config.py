"""
Configuration data models.

All configuration objects are frozen dataclasses so that a reloaded
configuration can be compared by value with the running one.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True)
class SessionConfig:
    """
    Connection parameters for the IRC session, loaded from the `[irc]` table.
    """

    # Hostname or address of the server the bot connects to.
    server: str
    # The bot's nickname; also the default for username and realname.
    nickname: str
    port: int = 6667
    use_tls: bool = False
    username: Optional[str] = None
    realname: Optional[str] = None
    # Optional server password sent with PASS before registration.
    password: Optional[str] = None

    @property
    def effective_username(self) -> str:
        return self.username or self.nickname

    @property
    def effective_realname(self) -> str:
        return self.realname or self.nickname


@dataclass(frozen=True)
class OperCredentials:
    """
    Operator credentials used to elevate the session, from the `[oper]` table.
    """

    name: str
    password: str

    def __repr__(self) -> str:
        return f"OperCredentials(name={self.name!r}, password='***')"


@dataclass(frozen=True)
class ExporterConfig:
    """
    HTTP exporter settings, loaded from the `[exporter]` table.
    """

    host: str = "127.0.0.1"
    port: int = 9187
    # Prepended to every metric name as "<prefix>_<name>" when non-empty.
    metric_prefix: str = ""

    @property
    def address(self) -> str:
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


@dataclass(frozen=True)
class Configuration:
    """
    The root configuration object for one run of the polling session.
    """

    session: SessionConfig
    # Ordered list of peers polled round-robin.
    servers: Tuple[str, ...]
    exporter: ExporterConfig = field(default_factory=ExporterConfig)
    oper: Optional[OperCredentials] = None
