"""
Policy lifecycle engine.

The state machine behind every ledger operation. Each public method is one
unit of work inside a host transaction: read the record, validate, apply the
transition, write it back. Time always comes from ``txn.timestamp``.

Status transitions:

    Active  -> Expired     (policy term ran out; evaluated lazily)
    Active  -> Claimed     (claim, premium fully paid)
    Active  -> Cancelled   (cancel, premium partly paid)
    Expired -> Claimed | Cancelled  (same guards)

Claimed and Cancelled are terminal.
"""

from datetime import timedelta
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any

import structlog

from policy_ledger.config.models import LedgerConfig
from policy_ledger.core.coverage import CoverageCalculator
from policy_ledger.core.exceptions import (
    AlreadyCancelledError,
    AlreadyClaimedError,
    InstallmentLimitReachedError,
    InvalidAmountError,
    InvalidInstallmentNoError,
    InvalidPolicyTypeError,
    InvalidProfitRateError,
    LedgerError,
    NotActiveError,
    PremiumAlreadyCompleteError,
    PremiumShortfallError,
    TooSoonError,
)
from policy_ledger.core.policy_store import PolicyStore
from policy_ledger.core.sequence import SequenceAllocator
from policy_ledger.core.serializers import decode_decimal, encode_decimal
from policy_ledger.domain.enums import PolicyStatus, PolicyType
from policy_ledger.domain.policy import Policy, PolicyCreate
from policy_ledger.utils.logging import LedgerLogger
from policy_ledger.utils.time_conversion import ensure_utc

if TYPE_CHECKING:
    from policy_ledger.store.protocol import TransactionContext


logger = structlog.get_logger()


def _to_decimal(value: Any, field: str) -> Decimal:
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except InvalidOperation:
            raise InvalidAmountError(f"{field} is not a number: {value!r}") from None
    if not result.is_finite():
        raise InvalidAmountError(f"{field} must be finite: {value!r}")
    return result


class PolicyLifecycleEngine:
    """
    Insurance policy state machine over a transactional keyed store.

    The engine holds no per-policy state of its own; everything lives in the
    store passed to each call, so one engine can serve any number of
    transactions.

    Usage:
        engine = PolicyLifecycleEngine(config)
        with store.transaction(ts) as txn:
            engine.init_ledger(txn)
        with store.transaction(ts) as txn:
            policy_id = engine.create_health_policy(
                txn, "Jane Doe", 42, "Dhaka", "Acme", premium=100, installment_no=2
            )
    """

    def __init__(self, config: LedgerConfig | None = None):
        """
        Initialize the engine.

        Args:
            config: Ledger configuration (defaults to LedgerConfig())
        """
        self.config = config or LedgerConfig()

        rules = self.config.policy
        storage = self.config.storage

        self.sequence = SequenceAllocator(storage.counter_key)
        self.policies = PolicyStore(storage.key_width)
        self.coverage = CoverageCalculator(self.config.packages, rules.default_profit_rate)

        self.profit_rate_key = storage.profit_rate_key
        self.payment_interval = timedelta(seconds=rules.payment_interval_seconds)
        self.policy_duration = timedelta(seconds=rules.policy_duration_seconds)

        self.log = LedgerLogger()

    # =========================================================================
    # Ledger administration
    # =========================================================================

    def init_ledger(self, txn: "TransactionContext") -> None:
        """Initialize the ledger with an empty policy counter."""
        self.sequence.initialize(txn)
        self.log.ledger_initialized(counter_key=self.sequence.counter_key)

    def get_default_profit_rate(self, txn: "TransactionContext") -> Decimal:
        """
        Current default profit rate.

        The administratively stored value when one exists, otherwise the
        configured default.
        """
        raw = txn.get(self.profit_rate_key)
        if raw is None:
            return self.coverage.default_rate
        return decode_decimal(self.profit_rate_key, raw)

    def update_default_profit_rate(self, txn: "TransactionContext", new_rate: Any) -> None:
        """
        Replace the default profit rate for future creations.

        Existing policies keep the coverage computed when they were created.

        Raises:
            InvalidProfitRateError: If new_rate is not positive
        """
        try:
            rate = _to_decimal(new_rate, "profit percentage")
        except InvalidAmountError as e:
            raise InvalidProfitRateError(str(e)) from None
        if rate <= 0:
            raise InvalidProfitRateError("profit percentage must be greater than 0")

        previous = self.get_default_profit_rate(txn)
        txn.put(self.profit_rate_key, encode_decimal(rate))
        logger.info("profit_rate_updated", previous=str(previous), new=str(rate))

    def calculate_maturity(
        self,
        txn: "TransactionContext",
        premium: Any,
        installment_no: int,
        profit_percentage: Any = 0,
    ) -> Decimal:
        """Maturity value using the ledger's current default profit rate."""
        return self.coverage.maturity(
            _to_decimal(premium, "premium"),
            installment_no,
            _to_decimal(profit_percentage, "profit percentage"),
            default_rate=self.get_default_profit_rate(txn),
        )

    # =========================================================================
    # Creation
    # =========================================================================

    def create_policy(self, txn: "TransactionContext", request: PolicyCreate) -> int:
        """
        Create a policy and return its new id.

        With a package name, premium, coverage and installment count come
        from the package. Without one, coverage is the maturity value of the
        requested plan.

        Raises:
            UnknownPackageError: If the package name does not resolve
            InvalidAmountError: If a custom premium is not positive
            InvalidInstallmentNoError: If a custom installment count is not positive
            NotInitializedError: If the ledger counter was never initialized
        """
        if request.package_name:
            package = self.coverage.package(request.package_name)
            premium = package.premium
            coverage = package.coverage
            installment_no = package.installment_no
        else:
            premium = request.premium
            installment_no = request.installment_no
            if premium <= 0:
                raise InvalidAmountError("premium must be greater than zero")
            if installment_no <= 0:
                raise InvalidInstallmentNoError("installment number must be greater than zero")
            coverage = self.coverage.maturity(
                premium,
                installment_no,
                request.profit_percentage,
                default_rate=self.get_default_profit_rate(txn),
            )

        policy_id = self.sequence.next(txn)

        effective_date = ensure_utc(txn.timestamp)
        policy = Policy(
            id=policy_id,
            holder_name=request.holder_name,
            age=request.age,
            location=request.location,
            company_name=request.company_name,
            policy_type=request.policy_type,
            package_name=request.package_name,
            premium=premium,
            coverage=coverage,
            effective_date=effective_date,
            expiration_date=effective_date + self.policy_duration,
            status=PolicyStatus.ACTIVE,
            installment_no=installment_no,
            total_premium_to_pay=premium * installment_no,
        )
        self.policies.write(txn, policy)

        self.log.policy_created(
            policy_id,
            policy_type=policy.policy_type.value,
            package_name=policy.package_name or None,
            coverage=str(policy.coverage),
            total_premium_to_pay=str(policy.total_premium_to_pay),
        )
        return policy_id

    def create_health_policy(
        self,
        txn: "TransactionContext",
        holder_name: str,
        age: int,
        location: str,
        company_name: str,
        package_name: str = "",
        premium: Any = 0,
        installment_no: int = 0,
        profit_percentage: Any = 0,
    ) -> int:
        """Create a Health policy."""
        return self.create_policy(
            txn,
            self._build_request(
                PolicyType.HEALTH, holder_name, age, location, company_name,
                package_name, premium, installment_no, profit_percentage,
            ),
        )

    def create_life_policy(
        self,
        txn: "TransactionContext",
        holder_name: str,
        age: int,
        location: str,
        company_name: str,
        package_name: str = "",
        premium: Any = 0,
        installment_no: int = 0,
        profit_percentage: Any = 0,
    ) -> int:
        """Create a Life policy."""
        return self.create_policy(
            txn,
            self._build_request(
                PolicyType.LIFE, holder_name, age, location, company_name,
                package_name, premium, installment_no, profit_percentage,
            ),
        )

    def _build_request(
        self,
        policy_type: PolicyType,
        holder_name: str,
        age: int,
        location: str,
        company_name: str,
        package_name: str,
        premium: Any,
        installment_no: int,
        profit_percentage: Any,
    ) -> PolicyCreate:
        return PolicyCreate(
            holder_name=holder_name,
            age=age,
            location=location,
            company_name=company_name,
            policy_type=policy_type,
            package_name=package_name,
            premium=_to_decimal(premium, "premium"),
            installment_no=installment_no,
            profit_percentage=_to_decimal(profit_percentage, "profit percentage"),
        )

    # =========================================================================
    # Reads
    # =========================================================================

    def read_policy(self, txn: "TransactionContext", policy_id: int) -> Policy:
        """
        Read a policy as of the transaction time.

        A policy past its expiration date is reported as Expired even if the
        stored record still says Active; nothing is written.
        """
        policy = self.policies.read(txn, policy_id)
        self._apply_expiry(policy, txn)
        return policy

    def get_total_paid(self, txn: "TransactionContext", policy_id: int) -> Decimal:
        return self.policies.read(txn, policy_id).total_paid

    def get_installment_no(self, txn: "TransactionContext", policy_id: int) -> int:
        return self.policies.read(txn, policy_id).installment_no

    def get_total_policies_count(self, txn: "TransactionContext") -> int:
        """Highest id ever allocated (deleted policies included)."""
        return self.sequence.current(txn)

    def get_all_policies(self, txn: "TransactionContext") -> list[Policy]:
        """
        All stored policies in ascending id order.

        Deleted ids are simply absent. Each record is seen as of the
        transaction time, like ``read_policy``. Returns an empty list when
        nothing has been allocated yet.
        """
        counter = self.sequence.current(txn)
        if counter == 0:
            return []
        policies = list(self.policies.scan(txn, 0, counter + 1))
        for policy in policies:
            self._apply_expiry(policy, txn)
        return policies

    # =========================================================================
    # Payments and settlement
    # =========================================================================

    def pay_premium(self, txn: "TransactionContext", policy_id: int, amount: Any) -> Policy:
        """
        Accept one installment payment.

        Raises:
            NotActiveError: If the policy is not Active (including expired)
            InstallmentLimitReachedError: If every installment is already paid
            InvalidAmountError: If amount is not positive
            TooSoonError: If the minimum interval since the last payment has
                not elapsed at the transaction time
        """
        policy = self._load_for_update(txn, policy_id)
        now = ensure_utc(txn.timestamp)

        if policy.status != PolicyStatus.ACTIVE:
            raise self._reject(
                "pay_premium", policy,
                NotActiveError("cannot pay premium on a policy that is not active"),
            )

        if policy.payment_count >= policy.installment_no:
            raise self._reject(
                "pay_premium", policy,
                InstallmentLimitReachedError("maximum number of premium payments reached"),
            )

        payment = _to_decimal(amount, "payment amount")
        if payment <= 0:
            raise self._reject(
                "pay_premium", policy,
                InvalidAmountError("payment amount must be greater than zero"),
            )

        if policy.last_payment_time is not None:
            elapsed = now - policy.last_payment_time
            if elapsed < self.payment_interval:
                raise self._reject(
                    "pay_premium", policy,
                    TooSoonError(
                        f"payment can only be made {self.payment_interval.total_seconds():g} "
                        f"seconds after the previous one ({elapsed.total_seconds():g}s elapsed)"
                    ),
                )

        policy.total_paid += payment
        policy.payment_count += 1
        policy.last_payment_time = now
        self.policies.write(txn, policy)

        self.log.premium_paid(
            policy_id,
            payment,
            policy.payment_count,
            total_paid=str(policy.total_paid),
        )
        return policy

    def claim_coverage(self, txn: "TransactionContext", policy_id: int) -> Policy:
        """
        Settle a fully paid policy by releasing its coverage.

        Raises:
            AlreadyClaimedError: If coverage was already claimed
            NotActiveError: If the policy was cancelled
            PremiumShortfallError: If total paid is below total premium to pay
        """
        policy = self._load_for_update(txn, policy_id)

        if policy.status == PolicyStatus.CLAIMED:
            raise self._reject(
                "claim_coverage", policy,
                AlreadyClaimedError("coverage for this policy has already been claimed"),
            )
        if policy.status == PolicyStatus.CANCELLED:
            raise self._reject(
                "claim_coverage", policy,
                NotActiveError("cannot claim coverage on a cancelled policy"),
            )
        if not policy.is_fully_paid:
            raise self._reject(
                "claim_coverage", policy,
                PremiumShortfallError(
                    f"total paid {policy.total_paid} is below the total premium "
                    f"to pay {policy.total_premium_to_pay}"
                ),
            )

        policy.user_balance += policy.coverage
        policy.status = PolicyStatus.CLAIMED
        self.policies.write(txn, policy)

        self.log.policy_settled("coverage_claimed", policy_id, policy.coverage)
        return policy

    def cancel_policy(self, txn: "TransactionContext", policy_id: int) -> Policy:
        """
        Settle a partly paid policy by refunding what was paid.

        A fully paid policy cannot be cancelled; it settles through
        ``claim_coverage``.

        Raises:
            AlreadyCancelledError: If the policy was already cancelled
            NotActiveError: If coverage was already claimed
            PremiumAlreadyCompleteError: If the premium is fully paid
        """
        policy = self._load_for_update(txn, policy_id)

        if policy.status == PolicyStatus.CANCELLED:
            raise self._reject(
                "cancel_policy", policy,
                AlreadyCancelledError("coverage for this policy has already been cancelled"),
            )
        if policy.status == PolicyStatus.CLAIMED:
            raise self._reject(
                "cancel_policy", policy,
                NotActiveError("cannot cancel a policy whose coverage was claimed"),
            )
        if policy.is_fully_paid:
            raise self._reject(
                "cancel_policy", policy,
                PremiumAlreadyCompleteError(
                    "premium is fully paid; claim the coverage instead of cancelling"
                ),
            )

        refund = policy.total_paid
        policy.user_balance += refund
        policy.status = PolicyStatus.CANCELLED
        self.policies.write(txn, policy)

        self.log.policy_settled("policy_cancelled", policy_id, refund)
        return policy

    def expire_policies(self, txn: "TransactionContext") -> list[int]:
        """
        Persist the Expired status of every Active policy past its term.

        Returns:
            Ids of the policies that were expired by this call
        """
        counter = self.sequence.current(txn)
        expired: list[int] = []
        for policy in self.policies.scan(txn, 0, counter + 1):
            if self._apply_expiry(policy, txn):
                self.policies.write(txn, policy)
                expired.append(policy.id)
        return expired

    # =========================================================================
    # Administrative mutations (no status guard)
    # =========================================================================

    def update_policy(
        self,
        txn: "TransactionContext",
        policy_id: int,
        holder_name: str,
        policy_type: PolicyType | str,
        premium: Any,
        coverage: Any,
        installment_no: int,
        total_premium_to_pay: Any,
    ) -> Policy:
        """
        Overwrite the named fields regardless of status.

        Nothing derived is recomputed.

        Raises:
            InvalidPolicyTypeError: If policy_type is not Health or Life
        """
        try:
            new_type = PolicyType(policy_type)
        except ValueError:
            raise InvalidPolicyTypeError(str(policy_type)) from None

        policy = self.policies.read(txn, policy_id)

        policy.holder_name = holder_name
        policy.policy_type = new_type
        policy.premium = _to_decimal(premium, "premium")
        policy.coverage = _to_decimal(coverage, "coverage")
        policy.installment_no = installment_no
        policy.total_premium_to_pay = _to_decimal(total_premium_to_pay, "total premium to pay")
        self.policies.write(txn, policy)

        self.log.policy_updated(policy_id, status=policy.status.value)
        return policy

    def set_installment_no(
        self,
        txn: "TransactionContext",
        policy_id: int,
        new_installment_no: int,
    ) -> None:
        """
        Change the target installment count.

        Raises:
            InvalidInstallmentNoError: If new_installment_no is not positive
        """
        if new_installment_no <= 0:
            raise InvalidInstallmentNoError("installment number must be greater than zero")

        policy = self.policies.read(txn, policy_id)
        policy.installment_no = new_installment_no
        self.policies.write(txn, policy)

        self.log.policy_updated(policy_id, installment_no=new_installment_no)

    def delete_policy(self, txn: "TransactionContext", policy_id: int) -> None:
        """Remove a policy record, bypassing the state machine."""
        self.policies.delete(txn, policy_id)
        self.log.policy_deleted(policy_id)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _load_for_update(self, txn: "TransactionContext", policy_id: int) -> Policy:
        policy = self.policies.read(txn, policy_id)
        if self._apply_expiry(policy, txn):
            self.log.policy_expired(policy_id, expiration_date=policy.expiration_date.isoformat())
        return policy

    def _apply_expiry(self, policy: Policy, txn: "TransactionContext") -> bool:
        """Mark an Active policy past its term as Expired. Returns True if changed."""
        if policy.status == PolicyStatus.ACTIVE and policy.is_expired_at(ensure_utc(txn.timestamp)):
            policy.status = PolicyStatus.EXPIRED
            return True
        return False

    def _reject(self, operation: str, policy: Policy, error: LedgerError) -> LedgerError:
        self.log.rejected(
            operation,
            type(error).__name__,
            policy_id=policy.id,
            status=policy.status.value,
        )
        return error
