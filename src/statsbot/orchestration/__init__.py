"""
Orchestration module for the polling service.

Components:
- TimeoutConstants: Timing constants shared across the package
- ReloadTrigger: Payload-free reload notification
- SignalHandler: Routes SIGHUP/SIGINT/SIGTERM into the event loop
- Supervisor: Keeps the exporter and one polling session alive
"""

# constants first: session, polling and exporter import it while this
# package is still initializing
from .constants import TimeoutConstants
from .reload import ReloadTrigger
from .signal_handler import SignalHandler
from .supervisor import ConfigLoader, Supervisor

__all__ = [
    "ConfigLoader",
    "ReloadTrigger",
    "SignalHandler",
    "Supervisor",
    "TimeoutConstants",
]
