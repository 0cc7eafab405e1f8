"""
Domain models for the policy ledger.

Pydantic models representing the persisted policy record and its requests.
"""

from policy_ledger.domain.enums import PolicyStatus, PolicyType
from policy_ledger.domain.policy import CoveragePackage, Policy, PolicyCreate

__all__ = [
    "PolicyStatus",
    "PolicyType",
    "CoveragePackage",
    "Policy",
    "PolicyCreate",
]
