"""
The polling state machine.

PollingStateMachine owns the PollState of one session. It does no I/O:
each inbound event or tick is turned into a new state plus a list of
effects that the async driver carries out. Requests are strictly
sequential; at most one peer is being waited on at any time.
"""

import logging
from typing import List, Optional, Sequence

from ..models.config import OperCredentials
from ..models.events import MotdEnd, Other, SessionEvent, StatsEnd, StatsLine, Welcome
from ..models.state import (
    Effect,
    Idle,
    NotConnected,
    PollState,
    PublishReport,
    SendOper,
    SendStatsRequest,
    WaitingForData,
)
from ..orchestration.constants import TimeoutConstants
from ..parser import parse_stats_z
from ..validation import MalformedReport

logger = logging.getLogger(__name__)


def next_index(target: int, count: int) -> int:
    """Index of the peer after `target`, wrapping around; 0 when there are no peers."""
    if count <= 0:
        return 0
    return (target + 1) % count


class PollingStateMachine:
    """
    Round-robin poller for the configured peers.

    Attributes:
        servers: Peer identifiers in polling order; fixed for the session
        oper: Operator credentials, sent once after the MOTD when present
        stuck_threshold: Consecutive unanswered ticks before a peer is abandoned
        state: The current PollState
        stuck_ticks: Unanswered ticks for the outstanding request (saturating)
    """

    def __init__(
        self,
        servers: Sequence[str],
        oper: Optional[OperCredentials] = None,
        stuck_threshold: int = TimeoutConstants.STUCK_TICK_THRESHOLD,
    ):
        if stuck_threshold < 1:
            raise ValueError(f"stuck_threshold must be >= 1, got {stuck_threshold}")
        self.servers = tuple(servers)
        self.oper = oper
        self.stuck_threshold = stuck_threshold
        self.state: PollState = NotConnected()
        self.stuck_ticks = 0
        self._oper_requested = False

    def _transition(self, new_state: PollState) -> None:
        logger.debug(f"Poll state {self.state} -> {new_state}")
        self.state = new_state

    def _server_at(self, index: int) -> Optional[str]:
        if 0 <= index < len(self.servers):
            return self.servers[index]
        return None

    def handle_event(self, event: SessionEvent) -> List[Effect]:
        """
        Apply one inbound session event.

        Returns:
            Effects to carry out, in order
        """
        if isinstance(event, Welcome):
            return self._on_welcome()
        if isinstance(event, MotdEnd):
            return self._on_motd_end()
        if isinstance(event, StatsLine):
            return self._on_stats_line(event)
        if isinstance(event, StatsEnd):
            return self._on_stats_end()
        if isinstance(event, Other):
            logger.debug(f"Ignoring {event.message.command} message")
            return []
        raise TypeError(f"Unknown session event: {event!r}")

    def handle_tick(self) -> List[Effect]:
        """Apply one periodic tick."""
        state = self.state
        if isinstance(state, Idle):
            target = state.next or 0
            server = self._server_at(target)
            if server is None:
                target = 0
                server = self._server_at(0)
            self.stuck_ticks = 0
            self._transition(WaitingForData(target=target))
            return [SendStatsRequest(target=target, server=server)]

        if isinstance(state, WaitingForData):
            self.stuck_ticks = min(self.stuck_ticks + 1, self.stuck_threshold)
            if self.stuck_ticks >= self.stuck_threshold:
                logger.warning(
                    f"No complete report from {self._describe(state.target)} after "
                    f"{self.stuck_ticks} ticks, moving on"
                )
                self._transition(Idle(next=next_index(state.target, len(self.servers))))
            return []

        # Not registered yet
        return []

    def _describe(self, target: int) -> str:
        server = self._server_at(target)
        return f"server '{server}'" if server is not None else "the connected server"

    def _on_welcome(self) -> List[Effect]:
        if not isinstance(self.state, NotConnected):
            logger.warning(f"Ignoring duplicate welcome while in {self.state}")
            return []
        logger.info("Session registered, starting to poll")
        self._transition(Idle())
        return []

    def _on_motd_end(self) -> List[Effect]:
        if self.oper is None or self._oper_requested:
            return []
        self._oper_requested = True
        logger.info(f"Requesting operator status as '{self.oper.name}'")
        return [SendOper(name=self.oper.name, password=self.oper.password)]

    def _on_stats_line(self, event: StatsLine) -> List[Effect]:
        state = self.state
        if not isinstance(state, WaitingForData):
            logger.warning(f"Unexpected stats line while in {state}: {event.text!r}")
            return []
        self._transition(WaitingForData(target=state.target, lines=state.lines + (event.text,)))
        return []

    def _on_stats_end(self) -> List[Effect]:
        state = self.state
        if not isinstance(state, WaitingForData):
            logger.info(f"Ignoring end of stats while in {state}")
            return []

        effects: List[Effect] = []
        try:
            report = parse_stats_z("\n".join(state.lines))
        except MalformedReport as e:
            logger.warning(f"Discarding report from {self._describe(state.target)}: {e}")
        else:
            server = self._server_at(state.target)
            if server is None:
                logger.warning("Discarding report that cannot be attributed to a configured server")
            else:
                effects.append(PublishReport(server=server, report=report))

        self._transition(Idle(next=next_index(state.target, len(self.servers))))
        return effects
