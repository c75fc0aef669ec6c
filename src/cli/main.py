"""Chronicle CLI entry points.
This module exposes replay commands over JSONL operation streams.
It maps argparse commands onto the replay and index APIs.
"""

from __future__ import annotations

import argparse
import json
from dataclasses import replace
from typing import Any, Sequence

from core.config import ChronicleConfig, parse_initial_capacity
from core.constants import MISSING_VALUE_MARKER
from core.errors import ChronicleError
from ingest.operation_reader import read_operations
from ingest.replay import ReplayResult, replay_operations


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="chronicle",
        description="Resolve reusable handles against their history over time",
    )
    parser.add_argument(
        "--initial-capacity",
        help="Override CHRONICLE_INITIAL_CAPACITY for this command",
    )
    parser.add_argument(
        "--check-invariants",
        action="store_true",
        help="Check index consistency after every operation",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_replay_command(subparsers)
    _add_entries_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the Chronicle CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = _build_config(args)
        result = replay_operations(read_operations(args.source), config)
    except ChronicleError as error:
        print(f"error={error}")
        return 1
    if args.command == "replay":
        return _run_replay_command(result)
    if args.command == "entries":
        return _run_entries_command(result)
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_config(args: argparse.Namespace) -> ChronicleConfig:
    """Build config with optional CLI overrides.

    Args:
        args: Parsed CLI args.

    Returns:
        Effective runtime configuration.
    """
    config = ChronicleConfig.from_env()
    if args.initial_capacity is not None:
        config = replace(config, initial_capacity=parse_initial_capacity(args.initial_capacity))
    if args.check_invariants:
        config = replace(config, check_invariants=True)
    return config


def _run_replay_command(result: ReplayResult) -> int:
    """Print each query resolution and the final record count."""
    for resolution in result.resolutions:
        rendered = _render_value(resolution.value) if resolution.found else MISSING_VALUE_MARKER
        print(f"{resolution.handle}\t{resolution.time}\t{rendered}")
    print(f"count={result.summary.final_record_count}")
    return 0


def _run_entries_command(result: ReplayResult) -> int:
    """Print every stored record, grouped by handle."""
    records = sorted(result.dictionary.entries(), key=lambda record: record.key)
    for record in records:
        print(f"{record.key}\t{record.start_time}\t{_render_value(record.value)}")
    return 0


def _render_value(value: Any) -> str:
    return json.dumps(value, sort_keys=True)


def _add_replay_command(subparsers: Any) -> None:
    """Register replay subcommand."""
    parser = subparsers.add_parser("replay", help="Replay operations and print query results")
    parser.add_argument("source", help="JSONL operation stream")


def _add_entries_command(subparsers: Any) -> None:
    """Register entries subcommand."""
    parser = subparsers.add_parser("entries", help="Replay operations and print stored records")
    parser.add_argument("source", help="JSONL operation stream")
