"""
Polling engine: the state machine and its async session driver.
"""

from .runner import PollingSession, SessionFactory
from .state_machine import PollingStateMachine, next_index

__all__ = [
    "PollingSession",
    "PollingStateMachine",
    "SessionFactory",
    "next_index",
]
