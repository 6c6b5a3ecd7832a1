"""
Events produced by a session and consumed by the polling state machine.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple, Union


@dataclass(frozen=True)
class IrcMessage:
    """
    One parsed IRC protocol line.

    Attributes:
        command: Command verb or three digit numeric, upper-cased
        params: Parameters, the trailing parameter last
        prefix: Message source without the leading colon
        tags: IRCv3 message tags
    """

    command: str
    params: Tuple[str, ...] = ()
    prefix: Optional[str] = None
    tags: Dict[str, str] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class Welcome:
    """Registration finished; the session can carry requests."""


@dataclass(frozen=True)
class MotdEnd:
    """End of the message of the day; operator elevation may be requested."""


@dataclass(frozen=True)
class StatsLine:
    """One fragment of a report, with the `<nick> <query>` parameters stripped."""

    text: str


@dataclass(frozen=True)
class StatsEnd:
    """The server finished answering the outstanding stats request."""


@dataclass(frozen=True)
class Other:
    """Any message the polling engine does not act on."""

    message: IrcMessage


SessionEvent = Union[Welcome, MotdEnd, StatsLine, StatsEnd, Other]
