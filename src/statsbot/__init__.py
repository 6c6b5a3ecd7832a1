"""
statsbot: IRC server memory statistics exporter.

This package connects to an IRC network, asks each configured server for
its `/stats z` memory report in turn, and republishes the latest counters
per server as metrics over HTTP.

The package is organized into specialized modules:
- config: Configuration loading and validation
- models: Data structures and type definitions
- validation: Value validation and error handling
- parser: The `/stats z` report grammar
- metrics: Latest-report store and text exposition
- session: Session contract and the IRC client
- polling: Polling state machine and its async driver
- exporter: HTTP metrics endpoint
- orchestration: Supervisor, reload trigger and signal handling
- cli: Command-line interface

Usage:
    From command line:
        statsbot run config.toml
        statsbot validate-configuration config.toml

    Programmatically:
        from statsbot import MetricsStore, Supervisor, load_configuration
        config = load_configuration("config.toml")
        store = MetricsStore(metric_prefix=config.exporter.metric_prefix)
        asyncio.run(Supervisor(lambda: load_configuration("config.toml"), store, config=config).run())
"""

__version__ = "0.1.0"

# Main interfaces; orchestration is imported before the modules that read
# its constants
from .config import get_config, load_configuration, reload_config, set_config_path
from .orchestration import ReloadTrigger, SignalHandler, Supervisor, TimeoutConstants
from .metrics import MetricsStore, to_prometheus_metrics
from .parser import parse_stats_z
from .polling import PollingSession, PollingStateMachine
from .session import AbstractSession, IrcSession
from .exporter import MetricsExporter
from .cli import main_cli

# Model classes for external use
from .models import (
    Configuration,
    ExporterConfig,
    OperCredentials,
    SessionConfig,
    StatsReport,
)

# Error types
from .validation import (
    ConfigError,
    ConfigParseError,
    ConfigReadError,
    ListenError,
    MalformedReport,
    ProtocolError,
    StatsbotError,
    ValidationError,
)

__all__ = [
    "__version__",
    # Main interfaces
    "get_config",
    "load_configuration",
    "reload_config",
    "set_config_path",
    "Supervisor",
    "ReloadTrigger",
    "SignalHandler",
    "TimeoutConstants",
    "MetricsStore",
    "to_prometheus_metrics",
    "parse_stats_z",
    "PollingSession",
    "PollingStateMachine",
    "AbstractSession",
    "IrcSession",
    "MetricsExporter",
    "main_cli",
    # Models
    "Configuration",
    "ExporterConfig",
    "OperCredentials",
    "SessionConfig",
    "StatsReport",
    # Errors
    "StatsbotError",
    "ConfigError",
    "ConfigReadError",
    "ConfigParseError",
    "ValidationError",
    "ProtocolError",
    "MalformedReport",
    "ListenError",
]
