"""
Coverage calculator for the policy ledger.

Computes the maturity value of an installment plan and resolves named
coverage packages. Everything here is pure: no store access, no clock.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Mapping

from policy_ledger.core.exceptions import UnknownPackageError
from policy_ledger.domain.policy import CoveragePackage

CENTS = Decimal("0.01")

DEFAULT_PROFIT_RATE = Decimal("13")


def calculate_maturity(
    premium: Decimal,
    installment_count: int,
    profit_rate_percent: Decimal,
    default_rate: Decimal = DEFAULT_PROFIT_RATE,
) -> Decimal:
    """
    Calculate the matured value of an installment plan.

    Each installment compounds for the number of periods left after it is
    paid, so the first installment compounds ``installment_count`` times and
    the last one once:

        sum(premium * (1 + rate/100) ** (n - k) for k in range(n))

    Args:
        premium: Amount paid per installment
        installment_count: Number of installments (n)
        profit_rate_percent: Profit rate per period in percent; values <= 0
            fall back to ``default_rate``
        default_rate: Rate used when ``profit_rate_percent`` is not positive

    The sum is rounded half-up to whole cents; the unrounded value is
    never returned.

    Returns:
        Matured value rounded half-up to cents

    Example:
        >>> calculate_maturity(Decimal("10000"), 1, Decimal("13"))
        Decimal('11300.00')
    """
    rate = Decimal(profit_rate_percent)
    if rate <= 0:
        rate = Decimal(default_rate)

    growth = 1 + rate / 100
    matured = Decimal("0")
    for k in range(installment_count):
        matured += Decimal(premium) * growth ** (installment_count - k)

    return matured.quantize(CENTS, rounding=ROUND_HALF_UP)


def resolve_package(
    name: str,
    packages: Mapping[str, CoveragePackage],
) -> CoveragePackage:
    """
    Look up a coverage package by exact name.

    Raises:
        UnknownPackageError: If no package has that name
    """
    try:
        return packages[name]
    except KeyError:
        raise UnknownPackageError(name) from None


class CoverageCalculator:
    """
    Coverage calculator bound to a package table and a configured default rate.

    The default rate passed to ``maturity`` wins over the configured one; the
    lifecycle engine uses this to apply the rate stored in the ledger.
    """

    def __init__(
        self,
        packages: Mapping[str, CoveragePackage],
        default_rate: Decimal = DEFAULT_PROFIT_RATE,
    ):
        self.packages = dict(packages)
        self.default_rate = Decimal(default_rate)

    def maturity(
        self,
        premium: Decimal,
        installment_count: int,
        profit_rate_percent: Decimal = Decimal("0"),
        default_rate: Decimal | None = None,
    ) -> Decimal:
        return calculate_maturity(
            premium,
            installment_count,
            profit_rate_percent,
            self.default_rate if default_rate is None else default_rate,
        )

    def package(self, name: str) -> CoveragePackage:
        return resolve_package(name, self.packages)

    @property
    def package_names(self) -> list[str]:
        return sorted(self.packages)
