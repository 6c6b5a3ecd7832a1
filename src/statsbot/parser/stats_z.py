"""
Parser for the `/stats z` memory report.

The report is a fixed, positional grammar: seventeen lines, each starting with
a literal label and carrying `count(bytes)` pairs or bare integers in a fixed
order. A report either matches the whole grammar and yields a StatsReport, or
parsing fails with MalformedReport. There is no partial result and no attempt
to resynchronise inside a report.
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, Optional, Pattern, Tuple

from ..models.report import StatsReport
from ..validation import MalformedReport

logger = logging.getLogger(__name__)

# Counters are unsigned 64-bit on the server side
MAX_COUNTER_VALUE = 2 ** 64 - 1

_PAIR = "{pair}"
_INT = "{int}"
_PLACEHOLDER_RE = re.compile(r"(\{pair\}|\{int\})")


@dataclass(frozen=True)
class LineGrammar:
    """
    Grammar of a single report line.

    Attributes:
        template: Human readable form, e.g. "Users {pair} Invites {pair}"
        pattern: Compiled regex that must match the entire line
        fields: StatsReport field for each captured number, None to discard it
    """

    template: str
    pattern: Pattern[str]
    fields: Tuple[Optional[str], ...]

    @property
    def label(self) -> str:
        return _PLACEHOLDER_RE.split(self.template)[0].strip()


def _line(template: str, *fields: Optional[str]) -> LineGrammar:
    """Compile a line template; `{pair}` captures two numbers, `{int}` one."""
    regex = []
    for part in _PLACEHOLDER_RE.split(template):
        if part == _PAIR:
            regex.append(r"([0-9]+)\(([0-9]+)\)")
        elif part == _INT:
            regex.append(r"([0-9]+)")
        else:
            regex.append(re.escape(part))
    pattern = re.compile("".join(regex), re.ASCII)
    if pattern.groups != len(fields):
        raise ValueError(
            f"Template '{template}' captures {pattern.groups} values but names {len(fields)} fields"
        )
    return LineGrammar(template=template, pattern=pattern, fields=fields)


STATS_Z_GRAMMAR: Tuple[LineGrammar, ...] = (
    _line("Users {pair} Invites {pair}",
          "users", "users_memory", "users_invited", "users_invited_memory"),
    _line("User channels {pair} Aways {pair}",
          "user_channels", "user_channels_memory", "users_away", "users_away_memory"),
    _line("Attached confs {pair}",
          "local_client_conf_count", "local_client_conf_memory"),
    _line("Conflines {pair}",
          "conf_count", "conf_memory"),
    _line("Classes {pair}",
          "classes_count", "classes_memory"),
    _line("Channels {pair}",
          "channels_count", "channels_memory"),
    _line("Bans {pair} Exceptions {pair} Invex {pair} Quiets {pair}",
          "channel_ban_count", "channel_ban_memory",
          "channel_exceptions_count", "channel_exceptions_memory",
          "channel_invex_count", "channel_invex_memory",
          "channel_quiets_count", "channel_quiets_memory"),
    _line("Channel members {pair} invite {pair}",
          "channel_members", "channel_members_memory",
          "channel_invites_count", "channel_invites_memory"),
    _line("Whowas array {pair}",
          "whowas_count", "whowas_memory"),
    _line("Hash: client {pair} chan {pair}",
          "hash_client_count", "hash_client_memory",
          "hash_channel_count", "hash_channel_memory"),
    _line("linebuf {pair}",
          "linebuf_count", "linebuf_memory"),
    _line("scache {pair}",
          "servers_cached_number", "servers_cached_memory"),
    _line("hostname hash {pair}",
          "hostname_count", "hostname_memory"),
    _line("Total: whowas {int} channel {int} conf {int}",
          None, "total_channel_memory", None),
    _line("Local client Memory in use: {pair}",
          "local_client_count", "local_client_memory"),
    _line("Remote client Memory in use: {pair}",
          "remote_client_count", "remote_client_memory"),
    _line("TOTAL: {int}",
          "total"),
)


def parse_stats_z(text: str) -> StatsReport:
    """
    Parse a complete `/stats z` reply into a StatsReport.

    Args:
        text: All report lines in arrival order, joined with a single "\\n"

    Returns:
        StatsReport with every counter populated

    Raises:
        MalformedReport: If a line is missing, a label does not match, a value
            is not an unsigned 64-bit integer, or text follows the last line

    Examples:
        >>> report = parse_stats_z(canonical_report)
        >>> report.total
        7377222
    """
    lines = text.split("\n")
    values: Dict[str, int] = {}

    for line_number, grammar in enumerate(STATS_Z_GRAMMAR, start=1):
        if line_number > len(lines):
            raise MalformedReport(
                f"report ended before the '{grammar.label}' line", line_number
            )
        line = lines[line_number - 1]
        match = grammar.pattern.fullmatch(line)
        if match is None:
            raise MalformedReport(
                f"expected '{grammar.template}', got {line!r}", line_number
            )
        for name, raw in zip(grammar.fields, match.groups()):
            value = int(raw)
            if value > MAX_COUNTER_VALUE:
                raise MalformedReport(
                    f"value {raw} in '{grammar.label}' line exceeds 64 bits", line_number
                )
            if name is not None:
                values[name] = value

    if len(lines) > len(STATS_Z_GRAMMAR):
        raise MalformedReport(
            f"unexpected trailing text: {lines[len(STATS_Z_GRAMMAR)]!r}",
            len(STATS_Z_GRAMMAR) + 1,
        )

    return StatsReport(**values)
