"""
Serialization helpers for values kept in the keyed store.

Policies are stored as camelCase JSON documents; scalars (the counter and
the profit-rate setting) are stored as their decimal string form.
"""

import json
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from pydantic import BaseModel, ValidationError

from policy_ledger.core.exceptions import CorruptStateError, PolicyCorruptError
from policy_ledger.domain.policy import Policy


class LedgerEncoder(json.JSONEncoder):
    """
    JSON encoder for ledger output.

    Handles:
    - date/datetime -> ISO format string
    - Decimal -> string (preserves precision)
    - Enum -> value
    - Pydantic models -> dict with camelCase keys
    """

    def default(self, obj: Any) -> Any:
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, date):
            return obj.isoformat()
        if isinstance(obj, Decimal):
            return str(obj)
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, BaseModel):
            return obj.model_dump(mode="json", by_alias=True)
        return super().default(obj)


def serialize_to_json(data: Any, indent: int | None = 2) -> str:
    """
    Serialize data to a JSON string using LedgerEncoder.

    Args:
        data: Data to serialize
        indent: JSON indentation (None for compact)

    Returns:
        JSON string
    """
    return json.dumps(data, cls=LedgerEncoder, indent=indent)


def encode_policy(policy: Policy) -> bytes:
    """Encode a policy record for storage."""
    return policy.model_dump_json(by_alias=True).encode("utf-8")


def decode_policy(policy_id: int, raw: bytes) -> Policy:
    """
    Decode a stored policy record.

    Raises:
        PolicyCorruptError: If the bytes are not a valid policy document
    """
    try:
        return Policy.model_validate_json(raw)
    except ValidationError as e:
        raise PolicyCorruptError(policy_id, f"{e.error_count()} validation error(s)") from e


def encode_int(value: int) -> bytes:
    return str(value).encode("utf-8")


def decode_int(key: str, raw: bytes) -> int:
    """
    Decode a stored integer scalar.

    Raises:
        CorruptStateError: If the bytes are not plain ASCII digits
    """
    # int() would also take signs, whitespace and underscores
    if not raw.isdigit():
        raise CorruptStateError(f"failed to convert {key} to int: {raw!r}")
    return int(raw)


def encode_decimal(value: Decimal) -> bytes:
    return str(value).encode("utf-8")


def decode_decimal(key: str, raw: bytes) -> Decimal:
    """
    Decode a stored decimal scalar.

    Raises:
        CorruptStateError: If the bytes are not a finite decimal
    """
    try:
        value = Decimal(raw.decode("utf-8"))
    except (UnicodeDecodeError, InvalidOperation) as e:
        raise CorruptStateError(f"failed to convert {key} to decimal: {raw!r}") from e
    if not value.is_finite():
        raise CorruptStateError(f"{key} is not a finite decimal: {raw!r}")
    return value
