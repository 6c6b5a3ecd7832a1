"""
Polling state and the effects a state transition asks the driver to perform.

PollState is a closed union of three frozen dataclasses. Transitions never
mutate a state in place; they build the next one.
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from .report import StatsReport


@dataclass(frozen=True)
class NotConnected:
    """The session has not completed registration yet."""


@dataclass(frozen=True)
class Idle:
    """No request outstanding; `next` is the peer index to poll (None means 0)."""

    next: Optional[int] = None


@dataclass(frozen=True)
class WaitingForData:
    """A request for peer `target` is outstanding; `lines` holds its fragments so far."""

    target: int
    lines: Tuple[str, ...] = ()


PollState = Union[NotConnected, Idle, WaitingForData]


@dataclass(frozen=True)
class SendStatsRequest:
    """Ask for a report from `server`, or from the connected server when None."""

    target: int
    server: Optional[str]


@dataclass(frozen=True)
class SendOper:
    name: str
    password: str

    def __repr__(self) -> str:
        return f"SendOper(name={self.name!r}, password='***')"


@dataclass(frozen=True)
class PublishReport:
    """Hand a complete report for `server` to the metrics store."""

    server: str
    report: StatsReport


Effect = Union[SendStatsRequest, SendOper, PublishReport]
