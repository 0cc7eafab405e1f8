"""
Shared test fixtures for policy ledger tests.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from policy_ledger.config.models import LedgerConfig, PolicyRulesConfig, StorageConfig
from policy_ledger.core.lifecycle import PolicyLifecycleEngine
from policy_ledger.domain.enums import PolicyType
from policy_ledger.domain.policy import PolicyCreate
from policy_ledger.store.memory import InMemoryStore


# =============================================================================
# Time Fixtures
# =============================================================================


@pytest.fixture
def t0() -> datetime:
    """Fixed transaction timestamp for the first transaction of a test."""
    return datetime(2024, 1, 1, 9, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def later(t0: datetime):
    """Build a timestamp a number of seconds after t0."""

    def _later(seconds: float) -> datetime:
        return t0 + timedelta(seconds=seconds)

    return _later


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def test_config() -> LedgerConfig:
    """Configuration with the reference rules (10s interval, 5 minute term)."""
    return LedgerConfig(
        policy=PolicyRulesConfig(
            default_profit_rate=Decimal("13"),
            payment_interval_seconds=10,
            policy_duration_seconds=300,
        ),
        storage=StorageConfig(
            counter_key="policyCounter",
            profit_rate_key="profitRateDefault",
            key_width=20,
        ),
    )


# =============================================================================
# Store and Engine Fixtures
# =============================================================================


@pytest.fixture
def store() -> InMemoryStore:
    """Empty in-memory store."""
    return InMemoryStore()


@pytest.fixture
def engine(test_config: LedgerConfig) -> PolicyLifecycleEngine:
    """Lifecycle engine with the test configuration."""
    return PolicyLifecycleEngine(test_config)


@pytest.fixture
def ledger(store: InMemoryStore, engine: PolicyLifecycleEngine, t0: datetime) -> InMemoryStore:
    """Store with an initialized ledger (counter = 0)."""
    with store.transaction(t0) as txn:
        engine.init_ledger(txn)
    return store


@pytest.fixture
def custom_request() -> PolicyCreate:
    """Custom (non-package) Health policy: 100 per installment, 2 installments."""
    return PolicyCreate(
        holder_name="Jane Doe",
        age=42,
        location="Dhaka",
        company_name="Acme Assurance",
        policy_type=PolicyType.HEALTH,
        premium=Decimal("100"),
        installment_no=2,
    )


@pytest.fixture
def policy_id(
    ledger: InMemoryStore,
    engine: PolicyLifecycleEngine,
    custom_request: PolicyCreate,
    t0: datetime,
) -> int:
    """Id of a freshly created custom policy."""
    with ledger.transaction(t0) as txn:
        return engine.create_policy(txn, custom_request)
