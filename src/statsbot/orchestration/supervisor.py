"""
Supervisor for the exporter and the polling session.

The Supervisor keeps the HTTP exporter up for the lifetime of the process
and exactly one polling session alive for the active configuration. A
session that ends for any reason is restarted after a fixed delay; a
reload with a changed configuration replaces it. Only an exporter failure
ends run() with an error.
"""

import asyncio
import logging
from typing import Callable, Optional

from ..exporter import MetricsExporter
from ..metrics import MetricsStore
from ..models.config import Configuration, ExporterConfig
from ..polling import PollingSession, SessionFactory
from ..validation import ConfigError, ErrorSeverity, ListenError, ProtocolError, handle_error
from .constants import TimeoutConstants
from .reload import ReloadTrigger

logger = logging.getLogger(__name__)

ConfigLoader = Callable[[], Configuration]
ExporterFactory = Callable[[MetricsStore, ExporterConfig], MetricsExporter]


def _default_exporter_factory(store: MetricsStore, config: ExporterConfig) -> MetricsExporter:
    return MetricsExporter(store, host=config.host, port=config.port)


class Supervisor:
    """
    Owns the exporter task and the polling session task.

    Attributes:
        config_loader: Called at startup (unless a configuration is given)
            and on every reload
        store: Store shared by the session and the exporter
        config: The configuration the current session runs with
        reload_trigger: Fired by the signal handler to request a reload
        session_task: The running (or delayed) polling session task
        session_starts: Number of session tasks spawned so far
    """

    def __init__(
        self,
        config_loader: ConfigLoader,
        store: MetricsStore,
        config: Optional[Configuration] = None,
        reload_trigger: Optional[ReloadTrigger] = None,
        session_factory: Optional[SessionFactory] = None,
        exporter_factory: Optional[ExporterFactory] = None,
        restart_delay: float = TimeoutConstants.RESTART_DELAY,
        tick_interval: float = TimeoutConstants.TICK_INTERVAL,
        stuck_threshold: int = TimeoutConstants.STUCK_TICK_THRESHOLD,
        exporter_shutdown_timeout: float = TimeoutConstants.EXPORTER_SHUTDOWN_TIMEOUT,
    ):
        self.config_loader = config_loader
        self.store = store
        self.config = config
        self.reload_trigger = reload_trigger or ReloadTrigger()
        self.session_factory = session_factory
        self.exporter_factory = exporter_factory or _default_exporter_factory
        self.restart_delay = restart_delay
        self.tick_interval = tick_interval
        self.stuck_threshold = stuck_threshold
        self.exporter_shutdown_timeout = exporter_shutdown_timeout

        self.exporter: Optional[MetricsExporter] = None
        self.session_task: Optional[asyncio.Task] = None
        self.session_starts = 0
        self._shutdown_requested = asyncio.Event()

    def request_shutdown(self) -> None:
        """Ask run() to stop the session, drain the exporter and return."""
        self._shutdown_requested.set()

    async def run(self) -> None:
        """
        Run until shutdown is requested.

        Raises:
            ConfigError: If the initial configuration cannot be loaded
            ListenError: If the exporter cannot bind or stops on its own
        """
        if self.config is None:
            self.config = self.config_loader()
        self.store.metric_prefix = self.config.exporter.metric_prefix

        self.exporter = self.exporter_factory(self.store, self.config.exporter)
        self.exporter.bind()
        exporter_task = asyncio.create_task(self.exporter.run(), name="exporter")
        self._spawn_session()

        reload_wait = asyncio.create_task(self.reload_trigger.wait(), name="reload-wait")
        shutdown_wait = asyncio.create_task(self._shutdown_requested.wait(), name="shutdown-wait")

        try:
            while True:
                waiters = {reload_wait, shutdown_wait, exporter_task}
                if self.session_task is not None:
                    waiters.add(self.session_task)
                done, _ = await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)

                if shutdown_wait in done:
                    logger.info("Shutting down")
                    break

                if exporter_task in done:
                    self._raise_exporter_failure(exporter_task)

                if self.session_task is not None and self.session_task in done:
                    self._on_session_done(self.session_task)

                if reload_wait in done:
                    await self._on_reload()
                    reload_wait = asyncio.create_task(self.reload_trigger.wait(), name="reload-wait")
        finally:
            for task in (reload_wait, shutdown_wait):
                task.cancel()
            await self._stop_session()
            await self._stop_exporter(exporter_task)

    def _spawn_session(self, delay: float = 0.0) -> None:
        session = PollingSession(
            self.config,
            self.store,
            session_factory=self.session_factory,
            tick_interval=self.tick_interval,
            stuck_threshold=self.stuck_threshold,
        )
        self.session_task = asyncio.create_task(
            self._run_session(session, delay), name="polling-session"
        )
        self.session_starts += 1

    async def _run_session(self, session: PollingSession, delay: float) -> None:
        if delay > 0:
            await asyncio.sleep(delay)
        logger.info(
            f"Starting polling session #{self.session_starts} "
            f"for {len(session.config.servers)} servers"
        )
        await session.run()

    def _on_session_done(self, task: asyncio.Task) -> None:
        error = task.exception()
        if error is None:
            logger.warning(f"Polling session ended, restarting in {self.restart_delay}s")
        elif isinstance(error, ProtocolError):
            logger.error(f"Polling session failed: {error}; restarting in {self.restart_delay}s")
        else:
            logger.error(
                f"Polling session crashed: {error!r}; restarting in {self.restart_delay}s",
                exc_info=error,
            )
        self._spawn_session(delay=self.restart_delay)

    async def _on_reload(self) -> None:
        logger.info("Reloading configuration")
        try:
            new_config = self.config_loader()
        except ConfigError as e:
            handle_error(
                error=e,
                context="reloading configuration, keeping the current one",
                severity=ErrorSeverity.ERROR,
                reraise=False,
                logger=logger
            )
            return

        if new_config == self.config:
            logger.info("Configuration unchanged, keeping the current session")
            return

        old_exporter = self.config.exporter
        if (new_config.exporter.host, new_config.exporter.port) != (old_exporter.host, old_exporter.port):
            logger.warning(
                f"Exporter address changed from {old_exporter.address} to "
                f"{new_config.exporter.address}; restart the process to apply it"
            )
        self.store.metric_prefix = new_config.exporter.metric_prefix

        await self._stop_session()
        self.config = new_config
        logger.info("Configuration changed, restarting the polling session")
        self._spawn_session()

    async def _stop_session(self) -> None:
        task, self.session_task = self.session_task, None
        if task is None:
            return
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)

    async def _stop_exporter(self, exporter_task: asyncio.Task) -> None:
        if self.exporter is not None:
            self.exporter.shutdown()
        done, _ = await asyncio.wait({exporter_task}, timeout=self.exporter_shutdown_timeout + 1.0)
        if not done:
            logger.warning("Exporter did not stop in time, cancelling it")
            exporter_task.cancel()
        await asyncio.gather(exporter_task, return_exceptions=True)

    def _raise_exporter_failure(self, exporter_task: asyncio.Task) -> None:
        if exporter_task.cancelled():
            raise ListenError("Exporter task was cancelled")
        error = exporter_task.exception()
        if error is not None:
            logger.error(f"Exporter failed: {error}")
            raise error
        raise ListenError("Exporter stopped unexpectedly")
