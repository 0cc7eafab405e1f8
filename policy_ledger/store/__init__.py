"""
Keyed store implementations for the policy ledger.

Provides:
- KeyValueStoreProtocol / TransactionContext (the host contract)
- InMemoryStore with optimistic transactions
- JsonFileStore for command-line use
"""

from policy_ledger.store.protocol import KeyValueStoreProtocol, TransactionContext
from policy_ledger.store.memory import InMemoryStore, Transaction
from policy_ledger.store.json_file import JsonFileStore

__all__ = [
    "KeyValueStoreProtocol",
    "TransactionContext",
    "InMemoryStore",
    "Transaction",
    "JsonFileStore",
]
