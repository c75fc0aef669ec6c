"""Shared typed models.

This module defines immutable data models used by ingest, replay,
and CLI layers to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

OperationKind = Literal["add", "query", "remove"]


@dataclass(frozen=True)
class HistoryOperation:
    """One producer or consumer step against a history index.

    Attributes:
        kind: Operation kind.
        handle: Reusable numeric handle.
        time: Start time for adds, query time for queries; unused by removes.
        value: Payload stored by adds.
        is_end_rundown: Marks an add that came from an end-of-trace rundown.
        source: Origin of the operation, usually ``path:line``.
    """

    kind: OperationKind
    handle: int
    time: int = 0
    value: Any = None
    is_end_rundown: bool = False
    source: str = ""


@dataclass(frozen=True)
class QueryResolution:
    """Outcome of one point-in-time query.

    Attributes:
        handle: Queried handle.
        time: Query time.
        found: Whether any value was in force at ``time``.
        value: Resolved payload, or None when not found.
    """

    handle: int
    time: int
    found: bool
    value: Any


@dataclass(frozen=True)
class ReplaySummary:
    """Aggregate counters for a replayed operation stream.

    Attributes:
        add_count: Number of add operations applied.
        remove_count: Number of remove operations applied.
        query_count: Number of queries resolved.
        hit_count: Number of queries that found a value.
        removed_record_count: Records discarded by removes.
        final_record_count: Records left in the index.
    """

    add_count: int
    remove_count: int
    query_count: int
    hit_count: int
    removed_record_count: int
    final_record_count: int
