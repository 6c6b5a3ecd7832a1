"""
Session implementations for talking to the polling target.

This module provides the abstract session contract and the IRC client
used in production.
"""

from .base import AbstractSession
from .irc import IrcSession, parse_irc_line, to_session_event

__all__ = [
    "AbstractSession",
    "IrcSession",
    "parse_irc_line",
    "to_session_event",
]
