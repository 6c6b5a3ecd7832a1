"""
Signal handling for the orchestration module.

This module routes process signals into the running event loop: SIGHUP
fires the reload trigger, SIGINT and SIGTERM request a graceful shutdown.
"""

import asyncio
import logging
import signal
from typing import Callable, List, Optional

from .reload import ReloadTrigger

logger = logging.getLogger(__name__)


class SignalHandler:
    """
    Manages signal registration and cleanup for a supervisor run.

    Handlers are installed on the event loop, so the callbacks run inside
    the loop and may touch asyncio objects directly.
    """

    def __init__(self, reload_trigger: ReloadTrigger, request_shutdown: Callable[[], None]):
        self.reload_trigger = reload_trigger
        self.request_shutdown = request_shutdown
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._installed: List[signal.Signals] = []
        self._shutdown_signalled = False

    def setup_signal_handlers(self) -> None:
        """Install the handlers on the running loop."""
        self._loop = asyncio.get_running_loop()

        handlers = [
            (signal.SIGINT, self._handle_shutdown),
            (signal.SIGTERM, self._handle_shutdown),
        ]
        sighup = getattr(signal, "SIGHUP", None)
        if sighup is not None:
            handlers.append((sighup, self._handle_reload))

        for signum, callback in handlers:
            try:
                self._loop.add_signal_handler(signum, callback, signum)
                self._installed.append(signum)
            except (NotImplementedError, RuntimeError, ValueError) as e:
                logger.warning(f"Failed to set up handler for {signum.name}: {e}")
        logger.debug(f"Signal handlers set up for {[s.name for s in self._installed]}")

    def cleanup_signal_handlers(self) -> None:
        """Remove the handlers installed by setup_signal_handlers()."""
        if self._loop is None:
            return
        for signum in self._installed:
            try:
                self._loop.remove_signal_handler(signum)
            except (NotImplementedError, RuntimeError, ValueError) as e:
                logger.warning(f"Failed to remove handler for {signum.name}: {e}")
        logger.debug("Signal handlers removed")
        self._installed = []
        self._loop = None

    def _handle_reload(self, signum: int) -> None:
        logger.info(f"Signal {signal.strsignal(signum)} received. Reloading configuration...")
        self.reload_trigger.trigger()

    def _handle_shutdown(self, signum: int) -> None:
        if self._shutdown_signalled:
            logger.warning("Shutdown already in progress. Please be patient.")
            return
        self._shutdown_signalled = True
        logger.info(f"Signal {signal.strsignal(signum)} received. Initiating graceful shutdown...")
        self.request_shutdown()
