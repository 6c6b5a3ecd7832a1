"""
Reload notification shared by the signal handler and the supervisor.
"""

import asyncio
import logging

logger = logging.getLogger(__name__)


class ReloadTrigger:
    """
    A payload-free notification that may fire any number of times.

    Triggers that arrive before the supervisor waits again are coalesced
    into one reload.
    """

    def __init__(self):
        self._event = asyncio.Event()

    def trigger(self) -> None:
        logger.debug("Reload triggered")
        self._event.set()

    async def wait(self) -> None:
        """Wait for the next trigger and consume it."""
        await self._event.wait()
        self._event.clear()
