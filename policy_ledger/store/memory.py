"""
In-memory keyed store with optimistic transactions.

Serves as the reference host for tests and for the file-backed store.
"""

import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator

import structlog

from policy_ledger.core.exceptions import HostFailureError, TransactionConflictError
from policy_ledger.utils.time_conversion import ensure_utc

logger = structlog.get_logger()


class InMemoryStore:
    """
    Dictionary-backed keyed store.

    Direct ``get``/``put``/``delete``/``range_scan`` calls act on committed
    state immediately. Ledger operations should go through
    ``transaction()`` instead, which gives them an isolated, atomically
    committed view.

    Usage:
        store = InMemoryStore()
        with store.transaction(timestamp) as txn:
            engine.init_ledger(txn)
    """

    def __init__(self, data: dict[str, bytes] | None = None) -> None:
        self._data: dict[str, bytes] = dict(data or {})
        self._versions: dict[str, int] = {key: 1 for key in self._data}
        self._lock = threading.Lock()
        self._commit_count = 0

    # ---- Committed state ----

    def get(self, key: str) -> bytes | None:
        return self._data.get(key)

    def put(self, key: str, value: bytes) -> None:
        with self._lock:
            self._apply({key: value})

    def delete(self, key: str) -> None:
        with self._lock:
            self._apply({key: None})

    def range_scan(self, lo: str, hi: str) -> Iterator[tuple[str, bytes]]:
        for key in sorted(k for k in list(self._data) if lo <= k < hi):
            value = self._data.get(key)
            if value is not None:
                yield key, value

    def keys(self) -> list[str]:
        """All committed keys in ascending order."""
        return sorted(self._data)

    @property
    def commit_count(self) -> int:
        return self._commit_count

    # ---- Transactions ----

    def begin(self, timestamp: datetime) -> "Transaction":
        """Start a transaction without a context manager."""
        return Transaction(self, timestamp)

    @contextmanager
    def transaction(self, timestamp: datetime) -> Iterator["Transaction"]:
        """
        Run a block inside one transaction.

        The buffered writes are committed when the block exits cleanly and
        discarded if it raises.

        Args:
            timestamp: Host transaction time handed to the ledger

        Raises:
            TransactionConflictError: If a key read in the block was changed
                by another commit first
        """
        txn = self.begin(timestamp)
        try:
            yield txn
        except BaseException:
            txn.rollback()
            raise
        txn.commit()

    def _read(self, key: str) -> tuple[bytes | None, int]:
        with self._lock:
            return self._data.get(key), self._versions.get(key, 0)

    def _commit(self, reads: dict[str, int], writes: dict[str, bytes | None]) -> None:
        with self._lock:
            stale = [
                key for key, version in reads.items()
                if self._versions.get(key, 0) != version
            ]
            if stale:
                logger.warning("transaction_conflict", keys=stale)
                raise TransactionConflictError(stale)
            # Committed state only changes once the new state is durable
            self._persist(self._staged(writes))
            self._apply(writes)
            self._commit_count += 1

    def _apply(self, writes: dict[str, bytes | None]) -> None:
        for key, value in writes.items():
            if value is None:
                self._data.pop(key, None)
            else:
                self._data[key] = value
            self._versions[key] = self._versions.get(key, 0) + 1

    def _staged(self, writes: dict[str, bytes | None]) -> dict[str, bytes]:
        staged = dict(self._data)
        for key, value in writes.items():
            if value is None:
                staged.pop(key, None)
            else:
                staged[key] = value
        return staged

    def _persist(self, data: dict[str, bytes]) -> None:
        """Hook for subclasses that write committed state somewhere durable."""
        pass


class Transaction:
    """
    One optimistic transaction over an InMemoryStore.

    Writes are buffered and visible to later reads in the same transaction.
    Every committed key the transaction reads is recorded with its version
    and re-checked at commit. Keys that appear inside a scanned range after
    the scan are not detected.
    """

    def __init__(self, store: InMemoryStore, timestamp: datetime) -> None:
        self._store = store
        self._timestamp = ensure_utc(timestamp)
        self._reads: dict[str, int] = {}
        self._writes: dict[str, bytes | None] = {}
        self._closed = False

    @property
    def timestamp(self) -> datetime:
        return self._timestamp

    def get(self, key: str) -> bytes | None:
        self._check_open()
        if key in self._writes:
            return self._writes[key]
        value, version = self._store._read(key)
        self._reads.setdefault(key, version)
        return value

    def put(self, key: str, value: bytes) -> None:
        self._check_open()
        if not isinstance(value, bytes):
            raise HostFailureError(f"value for {key!r} must be bytes, got {type(value).__name__}")
        self._writes[key] = value

    def delete(self, key: str) -> None:
        self._check_open()
        self._writes[key] = None

    def range_scan(self, lo: str, hi: str) -> Iterator[tuple[str, bytes]]:
        self._check_open()
        keys = {key for key, _ in self._store.range_scan(lo, hi)}
        keys.update(key for key in self._writes if lo <= key < hi)
        for key in sorted(keys):
            value = self.get(key)
            if value is not None:
                yield key, value

    def commit(self) -> None:
        self._check_open()
        self._closed = True
        if self._writes:
            self._store._commit(self._reads, self._writes)

    def rollback(self) -> None:
        self._closed = True
        self._writes.clear()

    def _check_open(self) -> None:
        if self._closed:
            raise HostFailureError("transaction is already closed")
