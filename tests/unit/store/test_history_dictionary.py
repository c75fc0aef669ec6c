"""Unit tests for the time-versioned handle index."""

from __future__ import annotations

import random

import pytest

from core.errors import ChronicleConfigError
from store.history_dictionary import ChainSnapshot, HistoryDictionary
from store.history_invariants import check_history_invariants


def _snapshot(dictionary: HistoryDictionary[str], handle: int) -> ChainSnapshot[str]:
    return next(item for item in dictionary.chain_snapshots() if item.handle == handle)


def _reference_lookup(adds: list[tuple[int, int, int, str]], handle: int, query_time: int):
    # adds holds (handle, start_time, sequence, value); latest sequence wins ties.
    matches = [
        (start_time, sequence, value)
        for add_handle, start_time, sequence, value in adds
        if add_handle == handle and start_time <= query_time
    ]
    if not matches:
        return False, None
    return True, max(matches)[2]


def test_out_of_order_add_takes_effect_until_later_start() -> None:
    """An earlier value added late should be in force until the later one starts."""
    history: HistoryDictionary[str] = HistoryDictionary(4)
    history.add(58, 1000, "A")
    history.add(58, 500, "B")

    assert history.try_get_value(58, 750) == (True, "B")
    assert history.try_get_value(58, 1000) == (True, "A")
    assert history.try_get_value(58, 400) == (False, None)


def test_try_get_value_returns_not_found_for_unknown_handle() -> None:
    """Lookups for handles without history should not fail."""
    history: HistoryDictionary[str] = HistoryDictionary(0)

    assert history.try_get_value(7, 100) == (False, None)
    assert history.get(7, 100, default="none") == "none"


def test_end_rundown_on_new_handle_starts_at_zero() -> None:
    """A rundown value for an unseen handle should be in force from time zero."""
    history: HistoryDictionary[str] = HistoryDictionary()

    record = history.add(9, 999, "R", is_end_rundown=True)

    assert record.start_time == 0 and history.get(9, 0) == "R"


def test_end_rundown_on_existing_handle_keeps_start_time() -> None:
    """A rundown value for a known handle should use ordinary insertion."""
    history: HistoryDictionary[str] = HistoryDictionary()
    history.add(9, 100, "start")

    record = history.add(9, 999, "R", is_end_rundown=True)

    assert record.start_time == 999
    assert history.get(9, 998) == "start" and history.get(9, 999) == "R"


def test_equal_start_time_prefers_most_recent_add() -> None:
    """Among records with the same start time the last added should win."""
    history: HistoryDictionary[str] = HistoryDictionary()
    history.add(3, 10, "first")
    history.add(3, 20, "later")
    history.add(3, 10, "second")

    assert history.get(3, 10) == "second"
    assert history.get(3, 15) == "second"
    assert history.get(3, 20) == "later"


def test_insert_before_head_keeps_chain_sorted() -> None:
    """Adding before the head should make the new record the chain head."""
    history: HistoryDictionary[str] = HistoryDictionary()
    history.add(1, 300, "c")
    history.add(1, 200, "b")
    history.add(1, 100, "a")

    snapshot = _snapshot(history, 1)

    assert [record.start_time for record in snapshot.records] == [100, 200, 300]
    check_history_invariants(history)


def test_remove_discards_whole_history_and_adjusts_count() -> None:
    """Removing a handle should drop all its records from lookups and count."""
    history: HistoryDictionary[str] = HistoryDictionary()
    for start_time in (10, 20, 30):
        history.add(4, start_time, f"v{start_time}")
    history.add(5, 10, "other")

    removed = history.remove(4)

    assert removed == 3 and history.count == 1 and len(history) == 1
    assert history.try_get_value(4, 30) == (False, None)
    assert 4 not in history and 5 in history


def test_remove_unknown_handle_is_noop() -> None:
    """Removing a handle without history should change nothing."""
    history: HistoryDictionary[str] = HistoryDictionary()
    history.add(1, 5, "x")

    assert history.remove(2) == 0 and history.count == 1


def test_handle_reuse_after_remove_starts_new_chain() -> None:
    """A recycled handle should only see values added after its removal."""
    history: HistoryDictionary[str] = HistoryDictionary()
    history.add(42, 100, "old-process")
    history.remove(42)

    history.add(42, 500, "new-process")

    assert history.get(42, 200) is None and history.get(42, 600) == "new-process"


def test_entries_yield_count_records_in_chain_order() -> None:
    """Enumeration should visit every record with per-handle ascending times."""
    history: HistoryDictionary[str] = HistoryDictionary()
    history.add(1, 50, "b")
    history.add(2, 10, "x")
    history.add(1, 5, "a")
    history.add(1, 70, "c")

    entries = list(history.entries())
    times_for_one = [record.start_time for record in entries if record.key == 1]

    assert len(entries) == history.count == 4
    assert times_for_one == [5, 50, 70]


def test_monotonic_adds_advance_skip_ahead_to_newest_record() -> None:
    """Increasing adds should leave the skip-ahead cache on the appended record."""
    history: HistoryDictionary[int] = HistoryDictionary()

    for start_time in range(0, 1000, 10):
        record = history.add(11, start_time, start_time)
        assert _snapshot(history, 11).skip_ahead is record


def test_monotonic_queries_follow_skip_ahead_fast_path() -> None:
    """Increasing queries should resolve exact values and move the cache forward."""
    history: HistoryDictionary[int] = HistoryDictionary()
    record_count = 1000
    for index in range(record_count):
        history.add(11, index * 3, index)

    for index in range(record_count):
        assert history.try_get_value(11, index * 3) == (True, index)
        assert _snapshot(history, 11).skip_ahead.value == index


def test_query_before_cached_position_falls_back_to_head() -> None:
    """A query earlier than the cache should still resolve from the head."""
    history: HistoryDictionary[str] = HistoryDictionary()
    for start_time, value in ((10, "a"), (20, "b"), (30, "c")):
        history.add(8, start_time, value)
    assert history.get(8, 35) == "c"

    assert history.get(8, 15) == "a"
    assert history.get(8, 5) is None


def test_add_behind_cached_position_is_spliced_correctly() -> None:
    """An add earlier than the cache should scan from the head."""
    history: HistoryDictionary[str] = HistoryDictionary()
    for start_time, value in ((10, "a"), (30, "c"), (40, "d")):
        history.add(8, start_time, value)

    history.add(8, 20, "b")

    assert [record.value for record in _snapshot(history, 8).records] == ["a", "b", "c", "d"]
    assert history.get(8, 25) == "b"


def test_negative_capacity_hint_is_rejected() -> None:
    """Construction should fail for a negative capacity hint."""
    with pytest.raises(ChronicleConfigError):
        HistoryDictionary(-1)


def test_signed_and_unsigned_spellings_name_the_same_handle() -> None:
    """A handle given as -1 and as its unsigned 64-bit form should share history."""
    history: HistoryDictionary[str] = HistoryDictionary()
    history.add(-1, 100, "signed")
    history.add(2**64 - 1, 200, "unsigned")

    assert history.get(2**64 - 1, 150) == "signed" and history.get(-1, 250) == "unsigned"
    assert -1 in history and history.remove(2**64 - 1) == 2
    assert history.count == 0 and history.get(-1, 250) is None


def _model_add(
    history: HistoryDictionary[str],
    adds: list[tuple[int, int, int, str]],
    handle: int,
    start_time: int,
    sequence: int,
    is_end_rundown: bool,
) -> None:
    value = f"{handle}:{start_time}:{sequence}"
    record = history.add(handle, start_time, value, is_end_rundown=is_end_rundown)
    has_history = any(item[0] == handle for item in adds)
    expected_start = 0 if is_end_rundown and not has_history else start_time
    assert record.start_time == expected_start
    adds.append((handle, expected_start, sequence, value))


@pytest.mark.parametrize("seed", [0, 1, 7, 42, 1234])
def test_random_operations_match_reference_model(seed: int) -> None:
    """Interleaved adds, rundown adds, queries, and removes should match a naive model."""
    rng = random.Random(seed)
    history: HistoryDictionary[str] = HistoryDictionary(8)
    adds: list[tuple[int, int, int, str]] = []
    sequence = 0
    for _ in range(600):
        handle = rng.randrange(5)
        roll = rng.random()
        if roll < 0.45:
            _model_add(history, adds, handle, rng.randrange(1, 200), sequence, False)
        elif roll < 0.55:
            _model_add(history, adds, handle, rng.randrange(1, 200), sequence, True)
        elif roll < 0.93:
            query_time = rng.randrange(-10, 220)
            expected = _reference_lookup(adds, handle, query_time)
            assert history.try_get_value(handle, query_time) == expected
        else:
            chain_length = sum(1 for item in adds if item[0] == handle)
            assert history.remove(handle) == chain_length
            adds = [item for item in adds if item[0] != handle]
            sequence += 1
            # Recycled handle: the next owner shows up right after the removal.
            _model_add(history, adds, handle, rng.randrange(1, 200), sequence, rng.random() < 0.5)
        sequence += 1
        assert history.count == len(adds)
        check_history_invariants(history)
