"""Core constants used across Chronicle modules.

This module centralizes non-domain-specific constants.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

import logging

DEFAULT_INITIAL_CAPACITY = 16
MIN_START_TIME = 0
MIN_HANDLE = -(2**63)
MAX_HANDLE_EXCLUSIVE = 2**64
MIN_TIME = -(2**63)
MAX_TIME_EXCLUSIVE = 2**63
SUPPORTED_OPERATION_KINDS = ("add", "query", "remove")
TRUE_FLAG_VALUES = ("1", "true", "yes", "on")
FALSE_FLAG_VALUES = ("0", "false", "no", "off", "")
MISSING_VALUE_MARKER = "-"
DEFAULT_LOG_LEVEL = logging.INFO
HANDLE_MASK = 2**64 - 1
