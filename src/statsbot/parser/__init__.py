"""
Report parsing for statsbot.
"""

from .stats_z import MAX_COUNTER_VALUE, STATS_Z_GRAMMAR, LineGrammar, parse_stats_z

__all__ = [
    "MAX_COUNTER_VALUE",
    "STATS_Z_GRAMMAR",
    "LineGrammar",
    "parse_stats_z",
]
