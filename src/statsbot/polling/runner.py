"""
Async driver for one polling session.

PollingSession connects a session, feeds its events and a periodic tick
into a PollingStateMachine one at a time, and carries out the effects the
machine returns. It runs until the session fails or the task is cancelled.
"""

import asyncio
import logging
from typing import Callable, List, Optional, Union

from ..metrics import MetricsStore
from ..models.config import Configuration, SessionConfig
from ..models.events import SessionEvent
from ..models.state import Effect, PublishReport, SendOper, SendStatsRequest
from ..orchestration.constants import TimeoutConstants
from ..session import AbstractSession, IrcSession
from ..validation import ProtocolError
from .state_machine import PollingStateMachine

logger = logging.getLogger(__name__)

SessionFactory = Callable[[SessionConfig], AbstractSession]


class _Tick:
    """Queue marker for a timer tick."""


_TICK = _Tick()

_QueueItem = Union[SessionEvent, _Tick, BaseException]


class PollingSession:
    """
    One lifetime of the polling connection.

    Attributes:
        config: Configuration this session was started with
        store: Where complete reports are published
        tick_interval: Seconds between ticks
        machine: The state machine of the current run, None before run()
    """

    def __init__(
        self,
        config: Configuration,
        store: MetricsStore,
        session_factory: Optional[SessionFactory] = None,
        tick_interval: float = TimeoutConstants.TICK_INTERVAL,
        stuck_threshold: int = TimeoutConstants.STUCK_TICK_THRESHOLD,
    ):
        self.config = config
        self.store = store
        self.session_factory: SessionFactory = session_factory or IrcSession
        self.tick_interval = tick_interval
        self.stuck_threshold = stuck_threshold
        self.machine: Optional[PollingStateMachine] = None

    async def run(self) -> None:
        """
        Connect and poll until the session fails.

        Raises:
            ProtocolError: When the connection cannot be made or is lost
        """
        session = self.session_factory(self.config.session)
        self.machine = PollingStateMachine(
            self.config.servers,
            oper=self.config.oper,
            stuck_threshold=self.stuck_threshold,
        )
        queue: "asyncio.Queue[_QueueItem]" = asyncio.Queue()

        try:
            await session.connect()
            await session.identify()

            pumps = [
                asyncio.create_task(self._pump_events(session, queue), name="session-events"),
                asyncio.create_task(self._pump_ticks(queue), name="session-ticks"),
            ]
            try:
                while True:
                    item = await queue.get()
                    if isinstance(item, BaseException):
                        raise item
                    if isinstance(item, _Tick):
                        effects = self.machine.handle_tick()
                    else:
                        effects = self.machine.handle_event(item)
                    await self._apply(session, effects)
            finally:
                for task in pumps:
                    task.cancel()
                await asyncio.gather(*pumps, return_exceptions=True)
        finally:
            await session.close()

    async def _pump_events(self, session: AbstractSession, queue: "asyncio.Queue[_QueueItem]") -> None:
        try:
            async for event in session.events():
                queue.put_nowait(event)
            queue.put_nowait(ProtocolError("Session event stream ended"))
        except asyncio.CancelledError:
            raise
        except Exception as e:
            queue.put_nowait(e)

    async def _pump_ticks(self, queue: "asyncio.Queue[_QueueItem]") -> None:
        while True:
            await asyncio.sleep(self.tick_interval)
            queue.put_nowait(_TICK)

    async def _apply(self, session: AbstractSession, effects: List[Effect]) -> None:
        for effect in effects:
            if isinstance(effect, SendStatsRequest):
                await session.send_stats_request(TimeoutConstants.STATS_QUERY, effect.server)
            elif isinstance(effect, SendOper):
                await session.send_oper(effect.name, effect.password)
            elif isinstance(effect, PublishReport):
                self.store.update(effect.server, effect.report)
            else:
                raise TypeError(f"Unknown effect: {effect!r}")
