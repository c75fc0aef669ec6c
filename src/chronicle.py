"""Public SDK surface for Chronicle.

This module provides a stable import path for library users.
It re-exports the history index and typed replay models.
"""

from __future__ import annotations

from core.config import ChronicleConfig
from core.errors import (
    ChronicleConfigError,
    ChronicleError,
    ChronicleIngestError,
    ChronicleInvariantError,
)
from core.types import HistoryOperation, QueryResolution, ReplaySummary
from ingest.operation_reader import read_operations
from ingest.replay import ReplayResult, replay_operations
from store.history_dictionary import HistoryDictionary, HistoryValue, canonical_handle
from store.history_invariants import check_history_invariants

__all__ = [
    "ChronicleConfig",
    "ChronicleConfigError",
    "ChronicleError",
    "ChronicleIngestError",
    "ChronicleInvariantError",
    "HistoryDictionary",
    "HistoryOperation",
    "HistoryValue",
    "QueryResolution",
    "ReplayResult",
    "ReplaySummary",
    "canonical_handle",
    "check_history_invariants",
    "read_operations",
    "replay_operations",
]
