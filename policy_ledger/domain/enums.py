"""
Enumeration types for policy ledger domain models.
"""

from enum import Enum


class PolicyStatus(str, Enum):
    """
    Policy status enumeration.

    Active is the only non-terminal settlement state. Expired is reached by
    time, Claimed and Cancelled by settlement.
    """
    ACTIVE = "Active"
    CANCELLED = "Cancelled"
    CLAIMED = "Claimed"
    EXPIRED = "Expired"


class PolicyType(str, Enum):
    """Policy type enumeration."""
    HEALTH = "Health"
    LIFE = "Life"
