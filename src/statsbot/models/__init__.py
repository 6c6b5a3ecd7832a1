"""
Data models and structures for statsbot.

Configuration Models:
- Session, operator and exporter settings, aggregated in Configuration

Report Models:
- StatsReport, the counters parsed from one `/stats z` reply

Session Models:
- IrcMessage and the session events the polling engine reacts to

Polling Models:
- PollState variants and the effects a transition emits
"""

from .config import Configuration, ExporterConfig, OperCredentials, SessionConfig
from .events import IrcMessage, MotdEnd, Other, SessionEvent, StatsEnd, StatsLine, Welcome
from .report import StatsReport
from .state import (
    Effect,
    Idle,
    NotConnected,
    PollState,
    PublishReport,
    SendOper,
    SendStatsRequest,
    WaitingForData,
)

__all__ = [
    # Configuration
    "Configuration",
    "ExporterConfig",
    "OperCredentials",
    "SessionConfig",
    # Report
    "StatsReport",
    # Session events
    "IrcMessage",
    "SessionEvent",
    "Welcome",
    "MotdEnd",
    "StatsLine",
    "StatsEnd",
    "Other",
    # Polling
    "PollState",
    "NotConnected",
    "Idle",
    "WaitingForData",
    "Effect",
    "SendStatsRequest",
    "SendOper",
    "PublishReport",
]
