"""Unit tests for history index consistency checks."""

from __future__ import annotations

import pytest

from core.errors import ChronicleInvariantError
from store.history_dictionary import HistoryDictionary, HistoryValue
from store.history_invariants import check_history_invariants


def _sample_history() -> HistoryDictionary[str]:
    history: HistoryDictionary[str] = HistoryDictionary()
    for start_time, value in ((10, "a"), (20, "b"), (30, "c")):
        history.add(1, start_time, value)
    history.add(2, 5, "z")
    return history


def test_check_passes_for_consistent_history() -> None:
    """A history built through the public API should pass every check."""
    history = _sample_history()
    history.try_get_value(1, 25)

    check_history_invariants(history)

    assert history.count == 4


def test_check_detects_out_of_order_chain() -> None:
    """Swapping start times should be reported as an ordering violation."""
    history = _sample_history()
    head = next(record for record in history.entries() if record.key == 1)
    head._start_time = 99

    with pytest.raises(ChronicleInvariantError, match="out of order"):
        check_history_invariants(history)


def test_check_detects_foreign_skip_ahead() -> None:
    """A skip-ahead record outside its own chain should be reported."""
    history = _sample_history()
    history._chains[1].skip_ahead = HistoryValue(1, 15, "stray")

    with pytest.raises(ChronicleInvariantError, match="skip-ahead"):
        check_history_invariants(history)


def test_check_detects_count_drift() -> None:
    """A maintained count that disagrees with the chains should be reported."""
    history = _sample_history()
    history._count += 1

    with pytest.raises(ChronicleInvariantError, match="count"):
        check_history_invariants(history)


def test_check_detects_cyclic_chain_without_hanging() -> None:
    """A chain whose tail links back to its head should fail the length check."""
    history = _sample_history()
    records = [record for record in history.entries() if record.key == 1]
    records[-1]._next = records[0]

    with pytest.raises(ChronicleInvariantError):
        check_history_invariants(history)
