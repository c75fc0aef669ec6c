"""Consistency checks for history indexes."""

from __future__ import annotations

from typing import Any

from core.errors import ChronicleInvariantError
from store.history_dictionary import ChainSnapshot, HistoryDictionary


def check_history_invariants(dictionary: HistoryDictionary[Any]) -> None:
    """Verify chain ordering, skip-ahead placement, and record counts.

    Args:
        dictionary: Index to inspect.

    Raises:
        ChronicleInvariantError: On the first violated invariant.
    """
    chain_total = 0
    for snapshot in dictionary.chain_snapshots():
        _check_chain(snapshot)
        chain_total += len(snapshot.records)
    if chain_total != dictionary.count:
        raise ChronicleInvariantError(
            f"Record count mismatch: chains hold {chain_total} records "
            f"but count is {dictionary.count}."
        )
    entry_total = sum(1 for _ in dictionary.entries())
    if entry_total != dictionary.count:
        raise ChronicleInvariantError(
            f"Enumeration yielded {entry_total} records but count is {dictionary.count}."
        )


def _check_chain(snapshot: ChainSnapshot[Any]) -> None:
    records = snapshot.records
    if not records:
        raise ChronicleInvariantError(f"Handle {snapshot.handle} has an empty chain.")
    if len(records) != snapshot.length:
        raise ChronicleInvariantError(
            f"Handle {snapshot.handle} chain holds {len(records)} records "
            f"but tracks length {snapshot.length}."
        )
    for previous, current in zip(records, records[1:]):
        if current.key != snapshot.handle:
            raise ChronicleInvariantError(
                f"Handle {snapshot.handle} chain contains a record for handle {current.key}."
            )
        if previous.start_time > current.start_time:
            raise ChronicleInvariantError(
                f"Handle {snapshot.handle} chain out of order: "
                f"{previous.start_time} precedes {current.start_time}."
            )
    if records[0].key != snapshot.handle:
        raise ChronicleInvariantError(
            f"Handle {snapshot.handle} chain head belongs to handle {records[0].key}."
        )
    skip_ahead = snapshot.skip_ahead
    if skip_ahead is not None and not any(record is skip_ahead for record in records):
        raise ChronicleInvariantError(
            f"Handle {snapshot.handle} skip-ahead record is not reachable from its head."
        )
