"""
Pydantic configuration models for the policy ledger.

These models define the structure and validation for ledger configuration.
"""

from decimal import Decimal
from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

from policy_ledger.domain.policy import CoveragePackage


def default_packages() -> dict[str, CoveragePackage]:
    """Built-in coverage packages."""
    return {
        "Silver": CoveragePackage(
            premium=Decimal("11112"),
            coverage=Decimal("540000"),
            installment_no=18,
        ),
        "Gold": CoveragePackage(
            premium=Decimal("10000"),
            coverage=Decimal("800000"),
            installment_no=20,
        ),
        "Platinum": CoveragePackage(
            premium=Decimal("13087"),
            coverage=Decimal("1410000"),
            installment_no=25,
        ),
    }


class PolicyRulesConfig(BaseModel):
    """Rules applied by the lifecycle engine."""

    default_profit_rate: Decimal = Field(
        default=Decimal("13"),
        gt=0,
        description=(
            "Annual profit percentage used by the maturity calculation when "
            "a creation request does not supply a positive rate. Can be "
            "replaced at runtime through the administrative update."
        ),
    )
    payment_interval_seconds: int = Field(
        default=10,
        ge=0,
        description="Minimum time between two accepted premium payments",
    )
    policy_duration_seconds: int = Field(
        default=300,
        gt=0,
        description=(
            "Policy term added to the effective date to get the expiration "
            "date. The reference value is five minutes; a production "
            "deployment would use years."
        ),
    )


class StorageConfig(BaseModel):
    """Keyed store layout."""

    counter_key: str = Field(
        default="policyCounter",
        min_length=1,
        description="Reserved key holding the last allocated policy id",
    )
    profit_rate_key: str = Field(
        default="profitRateDefault",
        min_length=1,
        description="Reserved key holding the administratively set profit rate",
    )
    key_width: int = Field(
        default=20,
        ge=1,
        le=32,
        description="Zero-padded width of policy keys (keeps range scans numeric)",
    )
    path: Path = Field(
        default=Path("ledger.json"),
        description="JSON file used by the file-backed store",
    )

    @field_validator("counter_key", "profit_rate_key")
    @classmethod
    def not_a_policy_key(cls, v: str) -> str:
        """Reserved keys must never collide with a zero-padded policy key."""
        if v.isdigit():
            raise ValueError(f"Reserved key {v!r} must not be all digits")
        return v


class LedgerConfig(BaseSettings):
    """
    Root ledger configuration.

    Values can be loaded from YAML files and overridden via environment
    variables (``POLICY_LEDGER_POLICY__PAYMENT_INTERVAL_SECONDS=30``).
    """

    policy: PolicyRulesConfig = Field(default_factory=PolicyRulesConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    packages: dict[str, CoveragePackage] = Field(default_factory=default_packages)

    model_config = {
        "env_prefix": "POLICY_LEDGER_",
        "env_nested_delimiter": "__",
    }
