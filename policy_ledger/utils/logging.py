"""
Structured logging configuration for the policy ledger.

Uses structlog for structured, contextual logging.
"""

import logging
import sys
from decimal import Decimal
from typing import Any

import structlog


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    include_timestamp: bool = True,
) -> None:
    """
    Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, output logs as JSON
        include_timestamp: If True, include timestamp in logs
    """
    # Logs go to stderr so CLI output on stdout stays machine-readable
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper()),
    )

    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_output:
        processors.append(structlog.processors.JSONRenderer(default=str))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class LedgerLogger:
    """
    Specialized logger for policy lifecycle events.

    Provides convenience methods for the events the lifecycle engine emits,
    so event names and field names stay consistent across operations.

    Usage:
        logger = LedgerLogger()
        logger.policy_created(policy_id, policy_type="Health", coverage=coverage)
        logger.premium_paid(policy_id, amount, payment_count)
    """

    def __init__(self, **context: Any):
        self._logger = structlog.get_logger().bind(**context)

    def bind(self, **kwargs: Any) -> "LedgerLogger":
        """Bind additional context to the logger."""
        self._logger = self._logger.bind(**kwargs)
        return self

    def ledger_initialized(self, **kwargs: Any) -> None:
        """Log ledger initialization."""
        self._logger.info("ledger_initialized", **kwargs)

    def policy_created(self, policy_id: int, **kwargs: Any) -> None:
        """Log policy creation."""
        self._logger.info("policy_created", policy_id=policy_id, **kwargs)

    def premium_paid(
        self,
        policy_id: int,
        amount: Decimal,
        payment_count: int,
        **kwargs: Any,
    ) -> None:
        """Log an accepted premium payment."""
        self._logger.info(
            "premium_paid",
            policy_id=policy_id,
            amount=str(amount),
            payment_count=payment_count,
            **kwargs,
        )

    def policy_settled(
        self,
        event: str,
        policy_id: int,
        released: Decimal,
        **kwargs: Any,
    ) -> None:
        """Log a terminal settlement (claim or cancel)."""
        self._logger.info(
            event,
            policy_id=policy_id,
            released=str(released),
            **kwargs,
        )

    def policy_expired(self, policy_id: int, **kwargs: Any) -> None:
        """Log the Active -> Expired transition."""
        self._logger.info("policy_expired", policy_id=policy_id, **kwargs)

    def policy_updated(self, policy_id: int, **kwargs: Any) -> None:
        """Log an administrative field update."""
        self._logger.info("policy_updated", policy_id=policy_id, **kwargs)

    def policy_deleted(self, policy_id: int, **kwargs: Any) -> None:
        """Log an administrative delete."""
        self._logger.warning("policy_deleted", policy_id=policy_id, **kwargs)

    def rejected(self, operation: str, reason: str, **kwargs: Any) -> None:
        """Log a rejected operation."""
        self._logger.debug(
            "operation_rejected",
            operation=operation,
            reason=reason,
            **kwargs,
        )
