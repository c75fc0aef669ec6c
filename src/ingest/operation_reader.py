"""Operation stream reader.

This module loads add, query, and remove operations from JSONL files.
It normalizes each line into a typed operation for replay.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping, cast

from core.constants import (
    MAX_HANDLE_EXCLUSIVE,
    MAX_TIME_EXCLUSIVE,
    MIN_HANDLE,
    MIN_TIME,
    SUPPORTED_OPERATION_KINDS,
)
from core.errors import ChronicleIngestError
from core.types import HistoryOperation, OperationKind


def read_operations(source_path: str | Path) -> list[HistoryOperation]:
    """Load operations from a JSONL file.

    Args:
        source_path: Path to a JSONL operation stream.

    Returns:
        Operations in file order.

    Raises:
        ChronicleIngestError: If the file is missing or any line is invalid.
    """
    file_path = Path(source_path).expanduser()
    if not file_path.is_file():
        raise ChronicleIngestError(
            f"Failed to read operations at {file_path}: file does not exist. "
            "Provide an existing JSONL file."
        )
    try:
        text = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as error:
        raise ChronicleIngestError(
            f"Failed to read operations at {file_path}: {error}. "
            "Provide a readable UTF-8 JSONL file."
        ) from error
    operations: list[HistoryOperation] = []
    for line_number, line in enumerate(text.splitlines(), 1):
        if not line.strip():
            continue
        source = f"{file_path}:{line_number}"
        payload = _parse_jsonl_line(source, line)
        operations.append(parse_operation(payload, source))
    return operations


def parse_operation(payload: Mapping[str, Any], source: str = "") -> HistoryOperation:
    """Validate one decoded operation payload.

    Args:
        payload: Decoded JSON object.
        source: Origin used in error messages.

    Returns:
        Typed operation.

    Raises:
        ChronicleIngestError: If fields are missing or out of range.
    """
    kind = payload.get("op")
    if kind not in SUPPORTED_OPERATION_KINDS:
        raise ChronicleIngestError(
            f"Invalid operation at {source}: 'op' must be one of "
            f"{SUPPORTED_OPERATION_KINDS}, got {kind!r}."
        )
    handle = _require_int(payload, "handle", source, MIN_HANDLE, MAX_HANDLE_EXCLUSIVE)
    if kind == "remove":
        return HistoryOperation(kind="remove", handle=handle, source=source)
    time = _require_int(payload, "time", source, MIN_TIME, MAX_TIME_EXCLUSIVE)
    if kind == "query":
        return HistoryOperation(kind="query", handle=handle, time=time, source=source)
    rundown = payload.get("rundown", False)
    if not isinstance(rundown, bool):
        raise ChronicleIngestError(
            f"Invalid operation at {source}: 'rundown' must be a boolean, got {rundown!r}."
        )
    return HistoryOperation(
        kind=cast(OperationKind, kind),
        handle=handle,
        time=time,
        value=payload.get("value"),
        is_end_rundown=rundown,
        source=source,
    )


def _parse_jsonl_line(source: str, line: str) -> dict[str, Any]:
    """Parse a JSONL row into an object.

    Raises:
        ChronicleIngestError: If the line is not a JSON object.
    """
    try:
        payload = json.loads(line)
    except json.JSONDecodeError as error:
        raise ChronicleIngestError(f"Invalid JSON at {source}: {error.msg}.") from error
    except ValueError as error:
        # Oversized integer literals hit the int digit limit inside the decoder.
        raise ChronicleIngestError(f"Invalid JSON at {source}: {error}.") from error
    if not isinstance(payload, dict):
        raise ChronicleIngestError(f"Invalid operation at {source}: expected a JSON object.")
    return payload


def _require_int(
    payload: Mapping[str, Any],
    field_name: str,
    source: str,
    minimum: int,
    maximum_exclusive: int,
) -> int:
    value = payload.get(field_name)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ChronicleIngestError(
            f"Invalid operation at {source}: '{field_name}' must be an integer, got {value!r}."
        )
    if not minimum <= value < maximum_exclusive:
        raise ChronicleIngestError(
            f"Invalid operation at {source}: '{field_name}' {value} is outside "
            f"[{minimum}, {maximum_exclusive})."
        )
    return value
