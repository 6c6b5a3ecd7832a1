"""
Text exposition of a StatsReport.

Each counter becomes one `name{server="peer"} value` line, in the order the
fields are declared on StatsReport. Peer names are validated as label-safe
when the configuration is loaded, so no escaping happens here.
"""

from typing import Optional

from ..models.report import StatsReport

CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"


def metric_name(field_name: str, prefix: str = "") -> str:
    """Build the exposed metric name for a report field."""
    if not prefix:
        return field_name
    return f"{prefix.rstrip('_')}_{field_name}"


def to_prometheus_metrics(
    report: StatsReport,
    server: Optional[str] = None,
    prefix: str = "",
) -> str:
    """
    Serialize a report to exposition text.

    Args:
        report: The report to serialize
        server: Value of the `server` label; lines carry no label when None
        prefix: Optional metric name prefix

    Returns:
        Newline-terminated text, one line per counter
    """
    out = []
    for name, value in report.items():
        full_name = metric_name(name, prefix)
        if server is not None:
            out.append(f'{full_name}{{server="{server}"}} {value}\n')
        else:
            out.append(f"{full_name} {value}\n")
    return "".join(out)
