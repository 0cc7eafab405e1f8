"""
Policy domain models for the policy ledger.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from policy_ledger.domain.enums import PolicyStatus, PolicyType


class CoveragePackage(BaseModel):
    """Named bundle of premium, coverage and installment count."""

    premium: Decimal = Field(..., gt=0)
    coverage: Decimal = Field(..., gt=0)
    installment_no: int = Field(..., gt=0)

    @property
    def total_premium_to_pay(self) -> Decimal:
        return self.premium * self.installment_no


class PolicyCreate(BaseModel):
    """
    Request model for creating a new policy.

    Premium and installment count are ignored when a package name is given;
    the package values replace them. Range checks happen in the lifecycle
    engine so that they surface as ledger errors.
    """

    holder_name: str
    age: int
    location: str = ""
    company_name: str = ""
    policy_type: PolicyType = PolicyType.HEALTH

    package_name: str = ""
    premium: Decimal = Decimal("0")
    installment_no: int = 0
    profit_percentage: Decimal = Decimal("0")  # <= 0 means "use the default"


class Policy(BaseModel):
    """
    Persisted policy record.

    Serialized with camelCase field names (``holderName``, ``totalPaid``...).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int = Field(..., ge=1)
    holder_name: str
    age: int
    location: str = ""
    company_name: str = ""
    policy_type: PolicyType
    package_name: str = ""

    premium: Decimal
    coverage: Decimal

    effective_date: datetime
    expiration_date: datetime

    total_paid: Decimal = Decimal("0")
    payment_count: int = 0
    last_payment_time: Optional[datetime] = None
    user_balance: Decimal = Decimal("0")

    status: PolicyStatus = PolicyStatus.ACTIVE
    installment_no: int
    total_premium_to_pay: Decimal

    @property
    def is_fully_paid(self) -> bool:
        return self.total_paid >= self.total_premium_to_pay

    def is_expired_at(self, now: datetime) -> bool:
        """True if the policy term has run out at ``now``."""
        return now >= self.expiration_date
