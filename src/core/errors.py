"""Chronicle exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class ChronicleError(Exception):
    """Base exception for all Chronicle failures."""


class ChronicleConfigError(ChronicleError):
    """Raised for invalid runtime configuration."""


class ChronicleIngestError(ChronicleError):
    """Raised for unreadable or malformed operation streams."""


class ChronicleInvariantError(ChronicleError):
    """Raised when a history index fails an internal consistency check."""
