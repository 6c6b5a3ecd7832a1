"""
Defines the abstract interface for a polling session.

This module provides AbstractSession, the contract the polling engine
drives: connect, identify, send requests and consume a stream of
SessionEvent values. IrcSession is the production implementation; tests
substitute scripted sessions.
"""

import logging
from abc import ABC, abstractmethod
from typing import AsyncIterator, Optional

from ..models.events import SessionEvent

logger = logging.getLogger(__name__)


class AbstractSession(ABC):
    """
    Abstract base class for a session with the polling target.

    Every method that talks to the remote end raises ProtocolError when the
    session can no longer be used. A session is single-use: once closed or
    failed it is discarded and a new one is built.
    """

    @abstractmethod
    async def connect(self) -> None:
        """Open the underlying connection."""
        pass

    @abstractmethod
    async def identify(self) -> None:
        """Send the registration handshake."""
        pass

    @abstractmethod
    async def send_stats_request(self, query: str, target: Optional[str] = None) -> None:
        """
        Request a stats report.

        Args:
            query: The stats query letter, e.g. "z"
            target: Peer to address the request to, None for the connected server
        """
        pass

    @abstractmethod
    async def send_oper(self, name: str, password: str) -> None:
        """Request operator elevation."""
        pass

    @abstractmethod
    def events(self) -> AsyncIterator[SessionEvent]:
        """
        Iterate over inbound events in arrival order.

        The iterator never ends normally; it raises ProtocolError when the
        connection is lost.
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        pass
