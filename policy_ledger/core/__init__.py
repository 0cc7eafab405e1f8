"""
Core ledger components.

Provides:
- SequenceAllocator: policy id allocation
- CoverageCalculator: maturity and package lookup
- PolicyStore: record storage over the keyed store
- PolicyLifecycleEngine: the policy state machine
"""

from policy_ledger.core.coverage import CoverageCalculator, calculate_maturity, resolve_package
from policy_ledger.core.lifecycle import PolicyLifecycleEngine
from policy_ledger.core.policy_store import PolicyStore
from policy_ledger.core.sequence import SequenceAllocator

__all__ = [
    "CoverageCalculator",
    "calculate_maturity",
    "resolve_package",
    "PolicyLifecycleEngine",
    "PolicyStore",
    "SequenceAllocator",
]
