"""
Latest-report-per-peer store shared by the polling session and the exporter.
"""

import logging
import threading
from typing import Dict, Optional

from ..models.report import StatsReport
from .exposition import to_prometheus_metrics

logger = logging.getLogger(__name__)


class MetricsStore:
    """
    Mapping of peer name to its most recent StatsReport.

    Last write wins and nothing is ever evicted. Reports are immutable, so
    replacing the dict entry under the lock is the whole update; a reader
    sees either the old report or the new one, never a mix. The lock is
    only held to swap an entry or to copy the mapping, never while
    formatting or doing I/O.
    """

    def __init__(self, metric_prefix: str = ""):
        self.metric_prefix = metric_prefix
        self._reports: Dict[str, StatsReport] = {}
        self._lock = threading.Lock()

    def update(self, server: str, report: StatsReport) -> None:
        """Replace the report held for `server`."""
        with self._lock:
            self._reports[server] = report
        logger.info(f"Updated metrics for {server}")

    def get(self, server: str) -> Optional[StatsReport]:
        with self._lock:
            return self._reports.get(server)

    def snapshot(self) -> Dict[str, StatsReport]:
        """Return a shallow copy of the current mapping."""
        with self._lock:
            return dict(self._reports)

    def render(self, server: Optional[str] = None) -> str:
        """
        Render exposition text for one peer or for every known peer.

        Args:
            server: Only render this peer when given

        Returns:
            The exposition text; empty when there is nothing to render
        """
        if server is not None:
            report = self.get(server)
            if report is None:
                return ""
            return to_prometheus_metrics(report, server=server, prefix=self.metric_prefix)

        return "".join(
            to_prometheus_metrics(report, server=name, prefix=self.metric_prefix)
            for name, report in self.snapshot().items()
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._reports)
