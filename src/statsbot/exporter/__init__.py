"""
HTTP exporter for the collected metrics.
"""

from .http_server import MetricsExporter, create_app

__all__ = [
    "MetricsExporter",
    "create_app",
]
