"""Operation replay against a history index.

This module applies producer and consumer operations in stream order
and collects query resolutions plus summary counters.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from core.config import ChronicleConfig
from core.logging_config import get_logger
from core.types import HistoryOperation, QueryResolution, ReplaySummary
from store.history_dictionary import HistoryDictionary
from store.history_invariants import check_history_invariants

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class ReplayResult:
    """Outcome of replaying an operation stream.

    Attributes:
        dictionary: Index state after the last operation.
        resolutions: Query resolutions in stream order.
        summary: Aggregate counters.
    """

    dictionary: HistoryDictionary[Any]
    resolutions: tuple[QueryResolution, ...]
    summary: ReplaySummary


def replay_operations(
    operations: Iterable[HistoryOperation],
    config: ChronicleConfig,
) -> ReplayResult:
    """Apply operations to a fresh index.

    Args:
        operations: Operations in the order they were observed.
        config: Runtime configuration.

    Returns:
        Replay result with final index state.

    Raises:
        ChronicleInvariantError: If invariant checks are enabled and fail.
    """
    dictionary: HistoryDictionary[Any] = HistoryDictionary(config.initial_capacity)
    resolutions: list[QueryResolution] = []
    add_count = 0
    remove_count = 0
    removed_record_count = 0
    for operation in operations:
        if operation.kind == "add":
            dictionary.add(
                operation.handle,
                operation.time,
                operation.value,
                is_end_rundown=operation.is_end_rundown,
            )
            add_count += 1
        elif operation.kind == "remove":
            removed_record_count += dictionary.remove(operation.handle)
            remove_count += 1
        else:
            found, value = dictionary.try_get_value(operation.handle, operation.time)
            resolutions.append(
                QueryResolution(
                    handle=operation.handle,
                    time=operation.time,
                    found=found,
                    value=value,
                )
            )
        if config.check_invariants:
            check_history_invariants(dictionary)
    summary = ReplaySummary(
        add_count=add_count,
        remove_count=remove_count,
        query_count=len(resolutions),
        hit_count=sum(1 for resolution in resolutions if resolution.found),
        removed_record_count=removed_record_count,
        final_record_count=dictionary.count,
    )
    _LOGGER.info(
        "replay_completed",
        add_count=summary.add_count,
        remove_count=summary.remove_count,
        query_count=summary.query_count,
        hit_count=summary.hit_count,
        final_record_count=summary.final_record_count,
        invariants_checked=config.check_invariants,
    )
    return ReplayResult(
        dictionary=dictionary,
        resolutions=tuple(resolutions),
        summary=summary,
    )
