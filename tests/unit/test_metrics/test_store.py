"""
Unit tests for the metrics store and text exposition.
"""

import dataclasses
import threading

import pytest

from statsbot.metrics import CONTENT_TYPE, MetricsStore, metric_name, to_prometheus_metrics
from statsbot.models import StatsReport


def _scaled(report: StatsReport, factor: int) -> StatsReport:
    return dataclasses.replace(
        report, **{name: value * factor + factor for name, value in report.items()}
    )


@pytest.mark.unit
class TestExposition:
    """Test cases for to_prometheus_metrics."""

    def test_one_line_per_field(self, canonical_report):
        text = to_prometheus_metrics(canonical_report, server="hub")
        lines = text.splitlines()

        assert text.endswith("\n")
        assert len(lines) == len(StatsReport.field_names())
        assert lines[0] == 'users{server="hub"} 10175'
        assert lines[-1] == 'total{server="hub"} 7377222'

    def test_without_server_label(self, canonical_report):
        lines = to_prometheus_metrics(canonical_report).splitlines()
        assert lines[0] == "users 10175"

    def test_prefix(self, canonical_report):
        lines = to_prometheus_metrics(canonical_report, server="hub", prefix="ircd").splitlines()
        assert lines[0] == 'ircd_users{server="hub"} 10175'

    def test_metric_name(self):
        assert metric_name("users") == "users"
        assert metric_name("users", "ircd") == "ircd_users"
        assert metric_name("users", "ircd_") == "ircd_users"

    def test_content_type(self):
        assert CONTENT_TYPE.startswith("text/plain; version=0.0.4")


@pytest.mark.unit
class TestMetricsStore:
    """Test cases for MetricsStore."""

    def test_empty_render(self):
        store = MetricsStore()
        assert store.render() == ""
        assert store.render("missing") == ""
        assert len(store) == 0

    def test_last_write_wins(self, canonical_report):
        store = MetricsStore()
        second = _scaled(canonical_report, 2)

        store.update("a", canonical_report)
        store.update("a", second)

        assert store.get("a") == second
        assert len(store) == 1
        assert 'total{server="a"} ' + str(second.total) in store.render()
        assert 'total{server="a"} 7377222' not in store.render()

    def test_render_all_peers(self, canonical_report):
        store = MetricsStore()
        report2 = _scaled(canonical_report, 3)
        store.update("a", canonical_report)
        store.update("b", report2)

        lines = set(store.render().splitlines())

        for name, value in canonical_report.items():
            assert f'{name}{{server="a"}} {value}' in lines
        for name, value in report2.items():
            assert f'{name}{{server="b"}} {value}' in lines
        assert len(lines) == 2 * len(StatsReport.field_names())

    def test_render_single_peer(self, canonical_report):
        store = MetricsStore()
        store.update("a", canonical_report)
        store.update("b", _scaled(canonical_report, 3))

        text = store.render("a")

        assert 'server="b"' not in text
        assert text == to_prometheus_metrics(canonical_report, server="a")

    def test_render_uses_prefix(self, canonical_report):
        store = MetricsStore(metric_prefix="ircd")
        store.update("a", canonical_report)
        assert store.render().startswith('ircd_users{server="a"} 10175\n')

    def test_concurrent_render_never_mixes_reports(self, canonical_report):
        """A render during updates sees one report or the other, in full."""
        store = MetricsStore()
        first = canonical_report
        second = _scaled(canonical_report, 2)
        store.update("a", first)
        expected = {
            to_prometheus_metrics(first, server="a"),
            to_prometheus_metrics(second, server="a"),
        }
        stop = threading.Event()

        def writer():
            while not stop.is_set():
                store.update("a", second)
                store.update("a", first)

        thread = threading.Thread(target=writer)
        thread.start()
        try:
            for _ in range(200):
                assert store.render() in expected
        finally:
            stop.set()
            thread.join()
