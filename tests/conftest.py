"""
Pytest configuration and shared fixtures for the statsbot test suite.

This module provides common fixtures, test utilities, and configuration
for all test modules in the statsbot project.
"""

import asyncio
import shutil
import sys
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from statsbot.models import (  # noqa: E402
    Configuration,
    ExporterConfig,
    OperCredentials,
    SessionConfig,
    StatsEnd,
    StatsLine,
)
from statsbot.session import AbstractSession  # noqa: E402


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


# ============================================================================
# Report Fixtures
# ============================================================================

CANONICAL_REPORT_LINES = [
    "Users 10175(1221000) Invites 0(0)",
    "User channels 30651(735624) Aways 496(14282)",
    "Attached confs 24(576)",
    "Conflines 0(0)",
    "Classes 12(960)",
    "Channels 1988(816734)",
    "Bans 826(66080) Exceptions 31(2480) Invex 552(44160) Quiets 131(10480)",
    "Channel members 30651(735624) invite 0(0)",
    "Whowas array 15000(5756672)",
    "Hash: client 131072(3145728) chan 65536(1572864)",
    "linebuf 0(0)",
    "scache 8(1152)",
    "hostname hash 131072(3145728)",
    "Total: whowas 5756672 channel 1618438 conf 0",
    "Local client Memory in use: 0(0)",
    "Remote client Memory in use: 0(0)",
    "TOTAL: 7377222",
]


@pytest.fixture
def canonical_report_lines() -> List[str]:
    """The lines of a complete `/stats z` reply."""
    return list(CANONICAL_REPORT_LINES)


@pytest.fixture
def canonical_report_text() -> str:
    return "\n".join(CANONICAL_REPORT_LINES)


@pytest.fixture
def canonical_report(canonical_report_text):
    """The StatsReport parsed from the canonical reply."""
    from statsbot.parser import parse_stats_z

    return parse_stats_z(canonical_report_text)


def report_events(lines: Iterable[str] = CANONICAL_REPORT_LINES) -> List[Any]:
    """Session events for one complete reply, end marker included."""
    return [StatsLine(text=line) for line in lines] + [StatsEnd()]


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def sample_config_data() -> Dict[str, Any]:
    """Sample configuration document for testing."""
    return {
        "irc": {
            "server": "irc.example.net",
            "port": 6697,
            "use_tls": True,
            "nickname": "statsbot",
            "realname": "Stats Bot",
        },
        "oper": {
            "name": "statsbot",
            "password": "hunter2",
        },
        "polling": {
            "servers": ["hub.example.net", "leaf1.example.net", "leaf2.example.net"],
        },
        "exporter": {
            "listen": "127.0.0.1:9187",
            "metric_prefix": "ircd",
        },
    }


@pytest.fixture
def config_file(temp_dir, sample_config_data) -> Path:
    """Write the sample configuration to a temporary TOML file."""
    import toml

    path = temp_dir / "statsbot.toml"
    with open(path, "w") as f:
        toml.dump(sample_config_data, f)
    return path


def make_configuration(
    servers: Iterable[str] = ("a", "b", "c"),
    oper: Optional[OperCredentials] = None,
    port: int = 0,
    metric_prefix: str = "",
) -> Configuration:
    """Build a Configuration directly, bypassing file loading."""
    return Configuration(
        session=SessionConfig(server="irc.test", nickname="statsbot"),
        servers=tuple(servers),
        exporter=ExporterConfig(host="127.0.0.1", port=port, metric_prefix=metric_prefix),
        oper=oper,
    )


@pytest.fixture(autouse=True)
def clear_config_after_test():
    """Automatically reset the cached configuration after each test."""
    yield

    from statsbot.config import manager

    manager.clear_config_cache()
    manager._CONFIG_FILE_PATH = None


# ============================================================================
# Session Doubles
# ============================================================================


class FakeSession(AbstractSession):
    """
    Scripted in-memory session.

    Events are fed with feed() or produced by `responder`, which is called
    with the target of every stats request and returns the events to queue.
    An exception put in the queue with fail() is raised from events().
    """

    def __init__(self, config: SessionConfig,
                 responder: Optional[Callable[[Optional[str]], List[Any]]] = None):
        self.config = config
        self.responder = responder
        self.sent: List[tuple] = []
        self.connected = False
        self.closed = False
        self._incoming: "asyncio.Queue[Any]" = asyncio.Queue()

    def feed(self, *events: Any) -> None:
        for event in events:
            self._incoming.put_nowait(event)

    def fail(self, error: BaseException) -> None:
        self._incoming.put_nowait(error)

    async def connect(self) -> None:
        self.connected = True

    async def identify(self) -> None:
        self.sent.append(("identify",))

    async def send_stats_request(self, query: str, target: Optional[str] = None) -> None:
        self.sent.append(("stats", query, target))
        if self.responder is not None:
            self.feed(*self.responder(target))

    async def send_oper(self, name: str, password: str) -> None:
        self.sent.append(("oper", name, password))

    async def events(self):
        while True:
            item = await self._incoming.get()
            if isinstance(item, BaseException):
                raise item
            yield item

    async def close(self) -> None:
        self.closed = True

    @property
    def stats_targets(self) -> List[Optional[str]]:
        return [entry[2] for entry in self.sent if entry[0] == "stats"]


class SessionRecorder:
    """Session factory that remembers every FakeSession it builds."""

    def __init__(self, responder: Optional[Callable[[Optional[str]], List[Any]]] = None,
                 on_create: Optional[Callable[[FakeSession], None]] = None):
        self.responder = responder
        self.on_create = on_create
        self.sessions: List[FakeSession] = []

    def __call__(self, config: SessionConfig) -> FakeSession:
        session = FakeSession(config, responder=self.responder)
        self.sessions.append(session)
        if self.on_create is not None:
            self.on_create(session)
        return session


async def wait_for_condition(predicate: Callable[[], bool], timeout: float = 2.0,
                             interval: float = 0.005) -> None:
    """Poll `predicate` until it holds, failing the test after `timeout` seconds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            pytest.fail("condition not met in time")
        await asyncio.sleep(interval)
