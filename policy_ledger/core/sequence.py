"""
Sequence allocator for policy identifiers.

A single counter key holds the last allocated id. Allocation is a
read-increment-write inside the caller's transaction, so the new id and
the record it numbers commit (or abort) together, and two transactions
racing for the counter conflict on commit instead of sharing an id.
"""

from typing import TYPE_CHECKING

import structlog

from policy_ledger.core.exceptions import NotInitializedError
from policy_ledger.core.serializers import decode_int, encode_int

if TYPE_CHECKING:
    from policy_ledger.store.protocol import KeyValueStoreProtocol


logger = structlog.get_logger()


class SequenceAllocator:
    """
    Issues unique, strictly increasing policy ids.

    Usage:
        allocator = SequenceAllocator("policyCounter")
        allocator.initialize(txn)
        policy_id = allocator.next(txn)   # 1
    """

    def __init__(self, counter_key: str = "policyCounter"):
        self.counter_key = counter_key

    def initialize(self, store: "KeyValueStoreProtocol") -> None:
        """Reset the counter to zero."""
        store.put(self.counter_key, encode_int(0))

    def current(self, store: "KeyValueStoreProtocol") -> int:
        """
        Read the last allocated id without changing it.

        Raises:
            NotInitializedError: If the counter key is absent
            CorruptStateError: If the counter value is not an integer
        """
        raw = store.get(self.counter_key)
        if raw is None:
            raise NotInitializedError("counter does not exist")
        return decode_int(self.counter_key, raw)

    def next(self, store: "KeyValueStoreProtocol") -> int:
        """
        Allocate the next id.

        Returns:
            The new id (previous counter value + 1)

        Raises:
            NotInitializedError: If the counter key is absent
            CorruptStateError: If the counter value is not an integer
        """
        counter = self.current(store) + 1
        store.put(self.counter_key, encode_int(counter))
        logger.debug("policy_id_allocated", policy_id=counter)
        return counter
