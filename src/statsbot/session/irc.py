"""
IRC client session over asyncio streams.

This module provides the line parser for IRC protocol messages and
IrcSession, which connects to a server, registers, answers PING and turns
the numerics the polling engine cares about into SessionEvent values.
"""

import asyncio
import logging
import ssl
from typing import AsyncIterator, Dict, List, Optional

from ..models.config import SessionConfig
from ..models.events import IrcMessage, MotdEnd, Other, SessionEvent, StatsEnd, StatsLine, Welcome
from ..orchestration.constants import TimeoutConstants
from ..validation import ProtocolError
from .base import AbstractSession

logger = logging.getLogger(__name__)

RPL_WELCOME = "001"
RPL_ENDOFSTATS = "219"
RPL_STATSDEBUG = "249"
RPL_ENDOFMOTD = "376"
ERR_NOMOTD = "422"

# Longest accepted line including IRCv3 tags
MAX_LINE_BYTES = 8191 + 512

_TAG_ESCAPES = {":": ";", "s": " ", "\\": "\\", "r": "\r", "n": "\n"}


def _unescape_tag_value(value: str) -> str:
    out: List[str] = []
    chars = iter(value)
    for ch in chars:
        if ch == "\\":
            nxt = next(chars, "")
            out.append(_TAG_ESCAPES.get(nxt, nxt))
        else:
            out.append(ch)
    return "".join(out)


def parse_irc_line(line: str) -> IrcMessage:
    """
    Parse one IRC protocol line.

    Args:
        line: The line without its CRLF terminator

    Returns:
        Parsed IrcMessage with an upper-cased command

    Raises:
        ValueError: If the line carries no command
    """
    rest = line.rstrip("\r\n")
    tags: Dict[str, str] = {}
    prefix: Optional[str] = None

    if rest.startswith("@"):
        raw_tags, _, rest = rest[1:].partition(" ")
        for item in raw_tags.split(";"):
            if not item:
                continue
            key, _, value = item.partition("=")
            tags[key] = _unescape_tag_value(value)
        rest = rest.lstrip(" ")

    if rest.startswith(":"):
        prefix, _, rest = rest[1:].partition(" ")
        rest = rest.lstrip(" ")

    trailing: Optional[str] = None
    if " :" in rest:
        rest, trailing = rest.split(" :", 1)
    elif rest.startswith(":"):
        rest, trailing = "", rest[1:]

    words = rest.split()
    if not words:
        raise ValueError(f"IRC line has no command: {line!r}")

    params = words[1:]
    if trailing is not None:
        params.append(trailing)

    return IrcMessage(command=words[0].upper(), params=tuple(params), prefix=prefix, tags=tags)


def to_session_event(message: IrcMessage) -> Optional[SessionEvent]:
    """
    Map a parsed message to the event the polling engine sees.

    Returns None for a stats line too short to carry report text.
    """
    command = message.command
    if command == RPL_WELCOME:
        return Welcome()
    if command in (RPL_ENDOFMOTD, ERR_NOMOTD):
        return MotdEnd()
    if command == RPL_STATSDEBUG:
        # <nick> <query> <text...>
        if len(message.params) < 3:
            logger.warning(f"Dropping short stats line: {message.params!r}")
            return None
        return StatsLine(text=" ".join(message.params[2:]))
    if command == RPL_ENDOFSTATS:
        return StatsEnd()
    return Other(message=message)


class IrcSession(AbstractSession):
    """
    A single connection to an IRC server.

    Attributes:
        config: Connection and registration parameters
        connect_timeout: Seconds allowed for the TCP/TLS handshake
    """

    def __init__(self, config: SessionConfig,
                 connect_timeout: float = TimeoutConstants.CONNECT_TIMEOUT):
        self.config = config
        self.connect_timeout = connect_timeout
        self._reader: Optional[asyncio.StreamReader] = None
        self._writer: Optional[asyncio.StreamWriter] = None

    async def connect(self) -> None:
        ssl_context = ssl.create_default_context() if self.config.use_tls else None
        logger.info(
            f"Connecting to {self.config.server}:{self.config.port}"
            f"{' (TLS)' if self.config.use_tls else ''}"
        )
        try:
            self._reader, self._writer = await asyncio.wait_for(
                asyncio.open_connection(
                    self.config.server,
                    self.config.port,
                    ssl=ssl_context,
                    limit=MAX_LINE_BYTES,
                ),
                timeout=self.connect_timeout,
            )
        except asyncio.TimeoutError as e:
            raise ProtocolError(
                f"Timed out connecting to {self.config.server}:{self.config.port}"
            ) from e
        except OSError as e:
            raise ProtocolError(
                f"Cannot connect to {self.config.server}:{self.config.port}: {e}"
            ) from e
        logger.info(f"Connected to {self.config.server}:{self.config.port}")

    async def send_line(self, line: str, log_line: Optional[str] = None) -> None:
        """
        Write one protocol line.

        Args:
            line: The line without a terminator
            log_line: Replacement text for the debug log, for lines with secrets
        """
        if self._writer is None:
            raise ProtocolError("Session is not connected")
        if "\r" in line or "\n" in line:
            raise ValueError(f"Protocol line must not contain line breaks: {line!r}")
        logger.debug(f">> {log_line if log_line is not None else line}")
        try:
            self._writer.write(line.encode("utf-8") + b"\r\n")
            await self._writer.drain()
        except (OSError, RuntimeError) as e:
            raise ProtocolError(f"Failed to send to {self.config.server}: {e}") from e

    async def identify(self) -> None:
        if self.config.password:
            await self.send_line(f"PASS {self.config.password}", log_line="PASS ***")
        await self.send_line(f"NICK {self.config.nickname}")
        await self.send_line(
            f"USER {self.config.effective_username} 0 * :{self.config.effective_realname}"
        )

    async def send_stats_request(self, query: str, target: Optional[str] = None) -> None:
        if target:
            await self.send_line(f"STATS {query} {target}")
        else:
            await self.send_line(f"STATS {query}")

    async def send_oper(self, name: str, password: str) -> None:
        await self.send_line(f"OPER {name} {password}", log_line=f"OPER {name} ***")

    async def _read_message(self) -> Optional[IrcMessage]:
        if self._reader is None:
            raise ProtocolError("Session is not connected")
        try:
            raw = await self._reader.readline()
        except (OSError, ValueError) as e:
            # ValueError is raised by StreamReader when a line exceeds the limit
            raise ProtocolError(f"Failed to read from {self.config.server}: {e}") from e
        if not raw:
            raise ProtocolError(f"Connection closed by {self.config.server}")

        line = raw.decode("utf-8", errors="replace").rstrip("\r\n")
        if not line.strip():
            return None
        logger.debug(f"<< {line}")
        try:
            return parse_irc_line(line)
        except ValueError as e:
            logger.warning(f"Ignoring unparseable line from {self.config.server}: {e}")
            return None

    async def events(self) -> AsyncIterator[SessionEvent]:
        while True:
            message = await self._read_message()
            if message is None:
                continue
            if message.command == "PING":
                token = message.params[-1] if message.params else ""
                await self.send_line(f"PONG :{token}")
                continue
            if message.command == "ERROR":
                reason = message.params[-1] if message.params else "no reason given"
                raise ProtocolError(f"Server {self.config.server} closed the link: {reason}")
            event = to_session_event(message)
            if event is not None:
                yield event

    async def close(self) -> None:
        writer, self._writer = self._writer, None
        self._reader = None
        if writer is None:
            return
        try:
            writer.close()
            await writer.wait_closed()
        except (OSError, ssl.SSLError) as e:
            logger.debug(f"Error while closing connection to {self.config.server}: {e}")
        logger.info(f"Disconnected from {self.config.server}")
