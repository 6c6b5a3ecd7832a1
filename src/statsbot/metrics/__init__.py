"""
Metrics storage and text exposition.
"""

from .exposition import CONTENT_TYPE, metric_name, to_prometheus_metrics
from .store import MetricsStore

__all__ = [
    "CONTENT_TYPE",
    "MetricsStore",
    "metric_name",
    "to_prometheus_metrics",
]
