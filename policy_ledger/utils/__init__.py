"""
Utility modules for the policy ledger.

Provides:
- Timestamp parsing and comparison
- Structured logging configuration
"""

from policy_ledger.utils.time_conversion import (
    ensure_utc,
    parse_timestamp,
    utc_now,
)
from policy_ledger.utils.logging import LedgerLogger, configure_logging

__all__ = [
    # Time conversion
    "ensure_utc",
    "parse_timestamp",
    "utc_now",
    # Logging
    "LedgerLogger",
    "configure_logging",
]
