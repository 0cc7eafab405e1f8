"""
Unit tests for the sequence allocator.
"""

import pytest

from policy_ledger.core.exceptions import CorruptStateError, NotFoundError, NotInitializedError
from policy_ledger.core.sequence import SequenceAllocator
from policy_ledger.store.memory import InMemoryStore


class TestSequenceAllocator:
    """Tests for counter-based id allocation."""

    def test_next_without_initialize_fails(self):
        store = InMemoryStore()

        with pytest.raises(NotInitializedError) as exc_info:
            SequenceAllocator().next(store)

        assert isinstance(exc_info.value, NotFoundError)

    def test_ids_are_sequential_from_one(self):
        store = InMemoryStore()
        allocator = SequenceAllocator()
        allocator.initialize(store)

        assert [allocator.next(store) for _ in range(5)] == [1, 2, 3, 4, 5]
        assert allocator.current(store) == 5

    def test_counter_stored_as_decimal_string(self):
        store = InMemoryStore()
        allocator = SequenceAllocator("seq")
        allocator.initialize(store)
        allocator.next(store)

        assert store.get("seq") == b"1"

    def test_corrupt_counter(self):
        store = InMemoryStore({"policyCounter": b"not-a-number"})

        with pytest.raises(CorruptStateError):
            SequenceAllocator().next(store)

        # Nothing written on failure
        assert store.get("policyCounter") == b"not-a-number"

    @pytest.mark.parametrize("raw", [b"-3", b" 7 ", b"1_0", b"+4", b""])
    def test_counter_must_be_plain_digits(self, raw):
        store = InMemoryStore({"policyCounter": raw})

        with pytest.raises(CorruptStateError):
            SequenceAllocator().next(store)

        assert store.get("policyCounter") == raw

    def test_initialize_resets(self):
        store = InMemoryStore()
        allocator = SequenceAllocator()
        allocator.initialize(store)
        allocator.next(store)
        allocator.initialize(store)

        assert allocator.current(store) == 0
