"""
Operational constants shared by the polling engine and the supervisor.
"""


class TimeoutConstants:
    """
    Centralized timing configuration.

    Components read these as constructor defaults so tests can shorten them.
    """
    # Polling engine
    TICK_INTERVAL = 5.0
    STUCK_TICK_THRESHOLD = 3

    # Session lifecycle
    CONNECT_TIMEOUT = 30.0
    RESTART_DELAY = 2.0

    # Exporter drain on shutdown
    EXPORTER_SHUTDOWN_TIMEOUT = 5.0

    # Stats query requested from every peer
    STATS_QUERY = "z"
