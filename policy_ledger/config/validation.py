"""
Configuration validation for the policy ledger.

Provides additional validation beyond Pydantic model validation.
"""

import structlog

from policy_ledger.config.models import LedgerConfig

logger = structlog.get_logger()


class ConfigurationError(Exception):
    """Raised when configuration is invalid."""

    pass


def validate_config(config: LedgerConfig) -> list[str]:
    """
    Validate ledger configuration.

    Performs cross-field checks that the Pydantic models cannot express.

    Args:
        config: LedgerConfig to validate

    Returns:
        List of warning messages (non-fatal issues)

    Raises:
        ConfigurationError: If configuration has fatal issues
    """
    warnings: list[str] = []
    errors: list[str] = []

    storage = config.storage
    if storage.counter_key == storage.profit_rate_key:
        errors.append(
            f"counter_key and profit_rate_key must differ (both {storage.counter_key!r})"
        )

    rules = config.policy
    if rules.payment_interval_seconds >= rules.policy_duration_seconds:
        warnings.append(
            f"Payment interval ({rules.payment_interval_seconds}s) is not shorter "
            f"than the policy duration ({rules.policy_duration_seconds}s); "
            "at most one installment can be paid before expiry."
        )

    if not config.packages:
        warnings.append("No coverage packages configured; only custom policies can be created.")

    for name, package in config.packages.items():
        if package.coverage < package.total_premium_to_pay:
            warnings.append(
                f"Package {name!r} pays out {package.coverage}, less than its "
                f"total premium {package.total_premium_to_pay}."
            )

    # Largest id that fits in the padded key
    max_id = 10 ** storage.key_width - 1
    if max_id < 1_000_000:
        warnings.append(
            f"key_width={storage.key_width} limits the ledger to {max_id} policies."
        )

    if errors:
        for error in errors:
            logger.error("config_validation_error", error=error)
        raise ConfigurationError(
            "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        )

    for warning in warnings:
        logger.warning("config_validation_warning", warning=warning)

    return warnings
