"""Tests for the search monitor."""

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from little_tsp.diagnostics import SearchMonitor  # noqa: E402


def test_counters():
    monitor = SearchMonitor()
    monitor.record_expansion(10)
    monitor.record_expansion(12)
    monitor.record_pruned()
    monitor.record_pruned(count=3)
    monitor.record_infeasible()

    assert monitor.nodes_expanded == 2
    assert monitor.nodes_pruned == 4
    assert monitor.nodes_infeasible == 1
    assert monitor.last_bound == 12


def test_incumbent_history_records_expansion_count():
    monitor = SearchMonitor()
    monitor.record_expansion(5)
    monitor.record_incumbent(40)
    monitor.record_expansion(6)
    monitor.record_expansion(7)
    monitor.record_incumbent(30)

    assert monitor.incumbent_history == [(1, 40), (3, 30)]
    assert monitor.incumbent_cost == 30


def test_gap():
    monitor = SearchMonitor()
    assert monitor.gap() is None

    monitor.record_expansion(bound=70)
    monitor.record_incumbent(cost=80)
    assert monitor.gap() == pytest.approx(0.125)


def test_gap_zero_cost_incumbent():
    monitor = SearchMonitor()
    monitor.record_expansion(0)
    monitor.record_incumbent(0)
    assert monitor.gap() == 0.0


def test_bound_window():
    monitor = SearchMonitor(window_size=3)
    for bound in range(10):
        monitor.record_expansion(bound)

    assert list(monitor.bound_history) == [7, 8, 9]
    assert monitor.nodes_expanded == 10


def test_summary():
    monitor = SearchMonitor()
    monitor.record_expansion(1)
    summary = monitor.summary()

    assert summary["nodes_expanded"] == 1
    assert summary["incumbent_cost"] is None
    assert summary["incumbent_updates"] == 0
    assert summary["gap"] is None
