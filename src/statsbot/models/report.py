"""
The structured form of one peer's `/stats z` memory report.
"""

from dataclasses import dataclass, fields
from typing import Iterator, Tuple


@dataclass(frozen=True)
class StatsReport:
    """
    Counters parsed from a complete `/stats z` reply.

    A StatsReport is only ever built by the parser from a reply that matched
    the whole grammar, so every field is always populated. Memory values are
    in bytes as reported by the server.
    """

    # "Users 10175(1221000) Invites 0(0)"
    users: int
    users_memory: int
    users_invited: int
    users_invited_memory: int

    # "User channels 30651(735624) Aways 496(14282)"
    user_channels: int
    user_channels_memory: int
    users_away: int
    users_away_memory: int

    # "Attached confs 24(576)"
    local_client_conf_count: int
    local_client_conf_memory: int

    # "Conflines 0(0)"
    conf_count: int
    conf_memory: int

    # "Classes 12(960)"
    classes_count: int
    classes_memory: int

    # "Channels 1988(816734)"
    channels_count: int
    channels_memory: int

    # "Bans 826(66080) Exceptions 31(2480) Invex 552(44160) Quiets 131(10480)"
    channel_ban_count: int
    channel_ban_memory: int
    channel_exceptions_count: int
    channel_exceptions_memory: int
    channel_invex_count: int
    channel_invex_memory: int
    channel_quiets_count: int
    channel_quiets_memory: int

    # "Channel members 30651(735624) invite 0(0)"
    channel_members: int
    channel_members_memory: int
    channel_invites_count: int
    channel_invites_memory: int

    # "Whowas array 15000(5756672)"
    whowas_count: int
    whowas_memory: int

    # "Hash: client 131072(3145728) chan 65536(1572864)"
    hash_client_count: int
    hash_client_memory: int
    hash_channel_count: int
    hash_channel_memory: int

    # "linebuf 0(0)"
    linebuf_count: int
    linebuf_memory: int

    # "scache 8(1152)"
    servers_cached_number: int
    servers_cached_memory: int

    # "hostname hash 131072(3145728)"
    hostname_count: int
    hostname_memory: int

    # "Total: whowas 5756672 channel 1618438 conf 0"
    # whowas and conf repeat values reported above, only channel is kept
    total_channel_memory: int

    # "Local client Memory in use: 0(0)"
    local_client_count: int
    local_client_memory: int

    # "Remote client Memory in use: 0(0)"
    remote_client_count: int
    remote_client_memory: int

    # "TOTAL: 7377222"
    total: int

    @classmethod
    def field_names(cls) -> Tuple[str, ...]:
        """Names of all counters in declaration order."""
        return tuple(f.name for f in fields(cls))

    def items(self) -> Iterator[Tuple[str, int]]:
        """Iterate over (counter name, value) pairs in declaration order."""
        for f in fields(self):
            yield f.name, getattr(self, f.name)
