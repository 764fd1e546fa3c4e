# eato/common/constants.py
"""
Shared constants and enums.
"""

from enum import Enum


class TypeMsg(str, Enum):
    """Log message types."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


# Redis key prefixes
WEBHOOK_LEDGER_PREFIX = "webhook:processed"

# Percent of the proposed price taken as deposit, and the flat fallback (currency units)
DEFAULT_DEPOSIT_PERCENT = 25.0
DEFAULT_DEPOSIT_UNITS = 100
