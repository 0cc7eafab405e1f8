"""
Policy store adapter.

Maps policy records onto the keyed store. Keys are the policy id
zero-padded to a fixed width, so lexicographic key order is numeric id
order and a range scan never interleaves "10" before "2".
"""

from typing import TYPE_CHECKING, Iterator

from policy_ledger.core.exceptions import PolicyNotFoundError
from policy_ledger.core.serializers import decode_policy, encode_policy
from policy_ledger.domain.policy import Policy

if TYPE_CHECKING:
    from policy_ledger.store.protocol import KeyValueStoreProtocol


class PolicyStore:
    """
    Reads and writes Policy records through a keyed store.

    Usage:
        policies = PolicyStore(key_width=20)
        policies.write(txn, policy)
        policy = policies.read(txn, policy.id)
    """

    def __init__(self, key_width: int = 20):
        self.key_width = key_width

    def key_for(self, policy_id: int) -> str:
        """Store key of a policy id."""
        if policy_id < 0:
            raise ValueError(f"policy id must not be negative: {policy_id}")
        key = f"{policy_id:0{self.key_width}d}"
        if len(key) > self.key_width:
            raise ValueError(f"policy id {policy_id} does not fit in {self.key_width} digits")
        return key

    def read(self, store: "KeyValueStoreProtocol", policy_id: int) -> Policy:
        """
        Read a policy.

        Raises:
            PolicyNotFoundError: If no record is stored under the id
            PolicyCorruptError: If the stored bytes do not deserialize
        """
        raw = store.get(self.key_for(policy_id))
        if raw is None:
            raise PolicyNotFoundError(policy_id)
        return decode_policy(policy_id, raw)

    def exists(self, store: "KeyValueStoreProtocol", policy_id: int) -> bool:
        return store.get(self.key_for(policy_id)) is not None

    def write(self, store: "KeyValueStoreProtocol", policy: Policy) -> None:
        """Store a policy, fully replacing any previous record under its id."""
        store.put(self.key_for(policy.id), encode_policy(policy))

    def delete(self, store: "KeyValueStoreProtocol", policy_id: int) -> None:
        store.delete(self.key_for(policy_id))

    def scan(
        self,
        store: "KeyValueStoreProtocol",
        lo_id: int,
        hi_id: int,
    ) -> Iterator[Policy]:
        """
        Lazily iterate policies with ``lo_id <= id < hi_id`` in id order.

        Raises:
            PolicyCorruptError: When an undecodable record is reached
        """
        if hi_id <= lo_id:
            return
        for key, raw in store.range_scan(self.key_for(lo_id), self.key_for(hi_id)):
            yield decode_policy(int(key), raw)
