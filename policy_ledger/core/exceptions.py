"""
Exception hierarchy for the policy ledger.

Five families, one per way an operation can fail:

- NotFoundError: a record or the counter is absent
- CorruptStateError: stored bytes cannot be decoded
- InvalidArgumentError: the request itself is unacceptable
- PreconditionFailedError: the record is in the wrong state for the request
- HostFailureError: the underlying store failed

Every error aborts the enclosing transaction.
"""


class LedgerError(Exception):
    """Base class for all ledger errors."""

    pass


class NotFoundError(LedgerError):
    """Raised when a record or the counter is absent."""

    pass


class NotInitializedError(NotFoundError):
    """Raised when the counter key has not been initialized."""

    pass


class PolicyNotFoundError(NotFoundError):
    """Raised when no policy is stored under the requested id."""

    def __init__(self, policy_id: int):
        super().__init__(f"policy {policy_id} does not exist")
        self.policy_id = policy_id


class CorruptStateError(LedgerError):
    """Raised when stored bytes cannot be parsed."""

    pass


class PolicyCorruptError(CorruptStateError):
    """Raised when a stored policy record does not deserialize."""

    def __init__(self, policy_id: int, detail: str):
        super().__init__(f"policy {policy_id} is corrupt: {detail}")
        self.policy_id = policy_id


class InvalidArgumentError(LedgerError):
    """Raised when a request argument is out of range."""

    pass


class InvalidAmountError(InvalidArgumentError):
    """Raised for non-positive payment amounts or negative premiums."""

    pass


class InvalidInstallmentNoError(InvalidArgumentError):
    """Raised for non-positive installment counts."""

    pass


class InvalidProfitRateError(InvalidArgumentError):
    """Raised when a non-positive default profit rate is submitted."""

    pass


class InvalidPolicyTypeError(InvalidArgumentError):
    """Raised when a policy type is neither Health nor Life."""

    def __init__(self, policy_type: str):
        super().__init__(f"policy type {policy_type!r} is not one of Health, Life")
        self.policy_type = policy_type


class UnknownPackageError(InvalidArgumentError):
    """Raised when a package name is not in the package table."""

    def __init__(self, package_name: str):
        super().__init__(f"package {package_name} does not exist")
        self.package_name = package_name


class PreconditionFailedError(LedgerError):
    """Raised when the policy is in the wrong state for the request."""

    pass


class NotActiveError(PreconditionFailedError):
    """Raised when an operation requires a status the policy no longer has."""

    pass


class InstallmentLimitReachedError(PreconditionFailedError):
    """Raised when every scheduled installment has already been paid."""

    pass


class TooSoonError(PreconditionFailedError):
    """Raised when a payment arrives before the minimum interval elapsed."""

    pass


class PremiumShortfallError(PreconditionFailedError):
    """Raised when a claim is made before the full premium is paid."""

    pass


class AlreadyClaimedError(PreconditionFailedError):
    """Raised when coverage has already been claimed."""

    pass


class AlreadyCancelledError(PreconditionFailedError):
    """Raised when the policy has already been cancelled."""

    pass


class PremiumAlreadyCompleteError(PreconditionFailedError):
    """Raised when cancelling a policy whose premium is fully paid."""

    pass


class HostFailureError(LedgerError):
    """Raised when the underlying store operation fails."""

    pass


class TransactionConflictError(HostFailureError):
    """Raised at commit when a key read by the transaction changed underneath it."""

    def __init__(self, keys: list[str]):
        super().__init__(f"transaction conflict on keys: {', '.join(sorted(keys))}")
        self.keys = keys
