"""Runtime configuration model for Chronicle.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os

from core.constants import DEFAULT_INITIAL_CAPACITY, FALSE_FLAG_VALUES, TRUE_FLAG_VALUES
from core.errors import ChronicleConfigError


@dataclass(frozen=True)
class ChronicleConfig:
    """Validated runtime configuration.

    Attributes:
        initial_capacity: Handle-table capacity hint for new indexes.
        check_invariants: Run consistency checks after each replayed operation.
    """

    initial_capacity: int
    check_invariants: bool

    @classmethod
    def from_env(cls) -> "ChronicleConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            ChronicleConfigError: If environment values are invalid.
        """
        capacity_value = os.getenv("CHRONICLE_INITIAL_CAPACITY", str(DEFAULT_INITIAL_CAPACITY))
        check_value = os.getenv("CHRONICLE_CHECK_INVARIANTS", "0")
        return cls(
            initial_capacity=parse_initial_capacity(capacity_value),
            check_invariants=_parse_flag("CHRONICLE_CHECK_INVARIANTS", check_value),
        )


def parse_initial_capacity(raw_value: str) -> int:
    """Parse a capacity hint value.

    Args:
        raw_value: Raw string from environment or CLI.

    Returns:
        Parsed non-negative integer.

    Raises:
        ChronicleConfigError: If value is not a non-negative integer.
    """
    try:
        capacity = int(raw_value)
    except ValueError as error:
        raise ChronicleConfigError(
            "Invalid CHRONICLE_INITIAL_CAPACITY value: "
            f"expected integer, got '{raw_value}'. "
            "Set CHRONICLE_INITIAL_CAPACITY to a numeric value."
        ) from error
    if capacity < 0:
        raise ChronicleConfigError(
            f"Invalid CHRONICLE_INITIAL_CAPACITY value: {capacity} is negative. "
            "Use zero or a positive capacity hint."
        )
    return capacity


def _parse_flag(name: str, raw_value: str) -> bool:
    normalized = raw_value.strip().lower()
    if normalized in TRUE_FLAG_VALUES:
        return True
    if normalized in FALSE_FLAG_VALUES:
        return False
    accepted = ", ".join(TRUE_FLAG_VALUES + FALSE_FLAG_VALUES[:-1])
    raise ChronicleConfigError(
        f"Invalid {name} value: expected one of {accepted}, got '{raw_value}'."
    )
