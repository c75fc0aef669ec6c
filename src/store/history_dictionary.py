"""Time-versioned lookup of reusable handles.

This module maps handles that get recycled over a trace (process IDs,
thread IDs, addresses) to the value in force at a given time. Each handle
owns a chain of records sorted by start time, and each chain caches a
skip-ahead record so forward-moving inserts and queries stay amortized O(1).
"""

from __future__ import annotations

from dataclasses import dataclass
from itertools import islice
from typing import Any, Generic, Iterator, TypeVar

from core.constants import HANDLE_MASK, MIN_START_TIME
from core.errors import ChronicleConfigError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)

ValueT = TypeVar("ValueT")


def canonical_handle(handle: int) -> int:
    """Reduce a handle to its unsigned 64-bit form.

    Signed and unsigned spellings of the same 64-bit pattern, such as ``-1``
    and ``2**64 - 1``, name the same handle.
    """
    return handle & HANDLE_MASK


class HistoryValue(Generic[ValueT]):
    """One time-stamped value of a handle.

    The value is in force from ``start_time`` until the next record of the
    same handle starts.
    """

    __slots__ = ("_key", "_start_time", "_value", "_next")

    def __init__(self, key: int, start_time: int, value: ValueT) -> None:
        self._key = key
        self._start_time = start_time
        self._value = value
        self._next: HistoryValue[ValueT] | None = None

    @property
    def key(self) -> int:
        return self._key

    @property
    def start_time(self) -> int:
        return self._start_time

    @property
    def value(self) -> ValueT:
        return self._value

    def __repr__(self) -> str:
        return (
            f"HistoryValue(key={self._key!r}, start_time={self._start_time!r}, "
            f"value={self._value!r})"
        )


@dataclass(frozen=True)
class ChainSnapshot(Generic[ValueT]):
    """Read-only view of one handle chain, used by consistency checks.

    Attributes:
        handle: Chain handle.
        records: Chain records in link order.
        skip_ahead: Cached skip-ahead record, or None when unset.
        length: Maintained chain length.
    """

    handle: int
    records: tuple[HistoryValue[ValueT], ...]
    skip_ahead: HistoryValue[ValueT] | None
    length: int


class _HistoryChain(Generic[ValueT]):
    """Sorted singly linked records of one handle.

    The chain object owns the head reference, so the key table entry stays
    valid when a record is inserted before the current head.
    """

    __slots__ = ("head", "skip_ahead", "length")

    def __init__(self, head: HistoryValue[ValueT]) -> None:
        self.head = head
        self.skip_ahead: HistoryValue[ValueT] | None = head
        self.length = 1

    def insert(self, record: HistoryValue[ValueT]) -> None:
        """Splice a record after every record starting at or before it."""
        start_time = record.start_time
        if start_time < self.head.start_time:
            record._next = self.head
            self.head = record
        else:
            cursor = self._scan_origin(start_time)
            following = cursor._next
            while following is not None and following.start_time <= start_time:
                cursor = following
                following = cursor._next
            record._next = following
            cursor._next = record
        self.skip_ahead = record
        self.length += 1

    def resolve(self, query_time: int) -> HistoryValue[ValueT] | None:
        """Return the last record starting at or before ``query_time``."""
        cursor = self._scan_origin(query_time)
        if cursor.start_time > query_time:
            return None
        following = cursor._next
        while following is not None and following.start_time <= query_time:
            cursor = following
            following = cursor._next
        self.skip_ahead = cursor
        return cursor

    def records(self) -> Iterator[HistoryValue[ValueT]]:
        record: HistoryValue[ValueT] | None = self.head
        while record is not None:
            yield record
            record = record._next

    def _scan_origin(self, time: int) -> HistoryValue[ValueT]:
        # Records before skip_ahead never start after it.
        skip_ahead = self.skip_ahead
        if skip_ahead is not None and skip_ahead.start_time <= time:
            return skip_ahead
        return self.head


class HistoryDictionary(Generic[ValueT]):
    """Index of handle values over time.

    ``add(58, 1000, a)`` followed by ``add(58, 500, b)`` makes ``b`` the value
    of handle 58 for times in ``[500, 1000)`` and ``a`` from 1000 onward.

    Handles are keyed by their 64-bit pattern (see ``canonical_handle``), and
    stored records carry the unsigned form as ``key``.

    Lookups move the per-chain skip-ahead cache, so the index is not safe for
    concurrent use, including concurrent reads.
    """

    def __init__(self, initial_capacity: int = 0) -> None:
        """Initialize an empty index.

        Args:
            initial_capacity: Expected number of distinct handles. Only a hint.

        Raises:
            ChronicleConfigError: If the hint is negative.
        """
        if initial_capacity < 0:
            raise ChronicleConfigError(
                f"Invalid initial capacity {initial_capacity}: "
                "capacity hint must be zero or positive."
            )
        self._initial_capacity = initial_capacity
        self._chains: dict[int, _HistoryChain[ValueT]] = {}
        self._count = 0

    @property
    def count(self) -> int:
        """Total number of records across all handles."""
        return self._count

    @property
    def initial_capacity(self) -> int:
        return self._initial_capacity

    def __len__(self) -> int:
        return self._count

    def __contains__(self, handle: object) -> bool:
        return isinstance(handle, int) and canonical_handle(handle) in self._chains

    def add(
        self,
        handle: int,
        start_time: int,
        value: ValueT,
        is_end_rundown: bool = False,
    ) -> HistoryValue[ValueT]:
        """Record that ``handle`` holds ``value`` from ``start_time`` onward.

        Args:
            handle: Reusable numeric handle.
            start_time: Time the value comes into force.
            value: Opaque payload.
            is_end_rundown: The value comes from a rundown snapshot. When the
                handle has no history yet, the value is taken to be in force
                since ``MIN_START_TIME``.

        Returns:
            The stored record.
        """
        handle = canonical_handle(handle)
        chain = self._chains.get(handle)
        if chain is None and is_end_rundown:
            start_time = MIN_START_TIME
        record = HistoryValue(handle, start_time, value)
        if chain is None:
            self._chains[handle] = _HistoryChain(record)
        else:
            chain.insert(record)
        self._count += 1
        return record

    def try_get_value(self, handle: int, query_time: int) -> tuple[bool, ValueT | None]:
        """Look up the value of ``handle`` in force at ``query_time``.

        Args:
            handle: Reusable numeric handle.
            query_time: Point in time to resolve.

        Returns:
            ``(True, value)`` for the latest record starting at or before
            ``query_time``, otherwise ``(False, None)``.
        """
        chain = self._chains.get(canonical_handle(handle))
        if chain is None:
            return False, None
        record = chain.resolve(query_time)
        if record is None:
            return False, None
        return True, record.value

    def get(self, handle: int, query_time: int, default: Any = None) -> Any:
        """Return the value in force at ``query_time`` or ``default``."""
        found, value = self.try_get_value(handle, query_time)
        return value if found else default

    def remove(self, handle: int) -> int:
        """Discard every record of ``handle``.

        Args:
            handle: Handle whose whole history is dropped.

        Returns:
            Number of records removed; zero for unknown handles.
        """
        handle = canonical_handle(handle)
        chain = self._chains.pop(handle, None)
        if chain is None:
            return 0
        chain.skip_ahead = None
        self._count -= chain.length
        _LOGGER.debug("history_chain_removed", handle=handle, record_count=chain.length)
        return chain.length

    def entries(self) -> Iterator[HistoryValue[ValueT]]:
        """Yield every record, each handle's records in ascending start time.

        Handle order is unspecified. Mutating the index while iterating is
        undefined.
        """
        for chain in self._chains.values():
            yield from chain.records()

    def chain_snapshots(self) -> Iterator[ChainSnapshot[ValueT]]:
        """Yield a read-only view of every chain and its skip-ahead cache.

        Each view holds at most ``count + 1`` records, so a cyclic chain shows
        up as a length mismatch instead of an endless walk.
        """
        limit = self._count + 1
        for handle, chain in self._chains.items():
            yield ChainSnapshot(
                handle=handle,
                records=tuple(islice(chain.records(), limit)),
                skip_ahead=chain.skip_ahead,
                length=chain.length,
            )
