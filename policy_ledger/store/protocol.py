"""
Protocol definitions for the keyed store the ledger runs against.

The lifecycle engine only ever talks to a TransactionContext: the store
operations of one host transaction plus the trusted transaction timestamp.
"""

from datetime import datetime
from typing import Iterator, Protocol, runtime_checkable


@runtime_checkable
class KeyValueStoreProtocol(Protocol):
    """
    Protocol for keyed store implementations.

    Keys are strings, values are raw bytes. ``range_scan`` yields
    ``(key, value)`` pairs with ``lo <= key < hi`` in ascending key order.
    """

    def get(self, key: str) -> bytes | None:
        """Return the value stored under key, or None if absent."""
        ...

    def put(self, key: str, value: bytes) -> None:
        """Store value under key, replacing any existing value."""
        ...

    def delete(self, key: str) -> None:
        """Remove key. Removing an absent key is a no-op."""
        ...

    def range_scan(self, lo: str, hi: str) -> Iterator[tuple[str, bytes]]:
        """Iterate stored pairs between lo (inclusive) and hi (exclusive)."""
        ...


@runtime_checkable
class TransactionContext(KeyValueStoreProtocol, Protocol):
    """
    Protocol for one host transaction.

    ``timestamp`` is the host-assigned transaction time. It must be the same
    value every time the transaction is re-executed.
    """

    @property
    def timestamp(self) -> datetime:
        """Trusted transaction time (timezone-aware)."""
        ...
