"""Tests for single and batch minting."""

import logging

import pytest

from carbon_ledger.core.allocator import IdentifierAllocator
from carbon_ledger.domain.errors import InvalidBatchSize, InvalidUri, NotAuthorized
from carbon_ledger.repositories.memory_impl import MemoryCounterRepository


class TestIdentifierAllocator:
    def test_starts_at_one(self):
        allocator = IdentifierAllocator(MemoryCounterRepository())

        assert allocator.current() == 0
        assert allocator.next_id() == 1
        assert allocator.next_id() == 2
        assert allocator.current() == 2

    def test_continues_from_stored_mark(self):
        allocator = IdentifierAllocator(MemoryCounterRepository(last_id=41))

        assert allocator.next_id() == 42


class TestMintOne:
    """Test cases for minting a single token."""

    def test_admin_mint(self, ledger):
        """Minting raises last_id by one and makes the caller the owner."""
        token_id = ledger.mint_one("admin", "ipfs://a")

        assert token_id == 1
        assert ledger.get_last_id() == 1
        assert ledger.get_owner(1) == "admin"
        assert ledger.get_uri(1) == "ipfs://a"
        assert ledger.is_burned(1) is False

    def test_ids_are_sequential(self, ledger):
        ids = [ledger.mint_one("admin", f"ipfs://{n}") for n in range(5)]

        assert ids == [1, 2, 3, 4, 5]
        assert ledger.total_minted() == 5

    def test_non_admin_rejected(self, ledger):
        with pytest.raises(NotAuthorized):
            ledger.mint_one("mallory", "ipfs://a")

        assert ledger.get_last_id() == 0
        assert ledger.get_uri(1) is None

    def test_invalid_uri_leaves_no_trace(self, ledger):
        with pytest.raises(InvalidUri):
            ledger.mint_one("admin", "x" * 257)

        assert ledger.get_last_id() == 0
        assert ledger.get_owner(1) is None
        assert ledger.get_events() == []

    def test_non_ascii_uri_rejected(self, ledger):
        with pytest.raises(InvalidUri):
            ledger.mint_one("admin", "ipfs://café")

    def test_mint_records_event(self, ledger):
        ledger.mint_one("admin", "ipfs://a")

        events = ledger.get_events()
        assert len(events) == 1
        assert events[0].sequence_number == 1
        assert events[0].event_type == "token_minted"
        assert events[0].event.owner == "admin"
        assert events[0].event.uri == "ipfs://a"


class TestMintBatch:
    """Test cases for batch minting with partial results."""

    def test_all_valid(self, ledger):
        ids = ledger.mint_batch("admin", ["ipfs://a", "ipfs://b", "ipfs://c"])

        assert ids == [1, 2, 3]
        assert [ledger.get_uri(i) for i in ids] == ["ipfs://a", "ipfs://b", "ipfs://c"]

    def test_invalid_item_is_dropped(self, ledger, caplog):
        """One bad URI among N gives N-1 ids, in order, and a warning."""
        uris = ["ipfs://a", "", "ipfs://c", "ipfs://d"]

        with caplog.at_level(logging.WARNING, logger="carbon_ledger.ledger"):
            ids = ledger.mint_batch("admin", uris)

        assert ids == [1, 2, 3]
        assert ledger.get_last_id() == 3
        assert ledger.get_uri(2) == "ipfs://c"
        assert any("dropped item 1" in r.getMessage() for r in caplog.records)

    def test_all_invalid_returns_empty(self, ledger):
        assert ledger.mint_batch("admin", ["", "x" * 300]) == []
        assert ledger.get_last_id() == 0

    def test_batch_continues_after_existing_tokens(self, ledger):
        ledger.mint_one("admin", "ipfs://first")

        assert ledger.mint_batch("admin", ["ipfs://a", "ipfs://b"]) == [2, 3]

    @pytest.mark.parametrize("size", [0, 51])
    def test_invalid_batch_size(self, ledger, size):
        with pytest.raises(InvalidBatchSize):
            ledger.mint_batch("admin", ["ipfs://a"] * size)

        assert ledger.get_last_id() == 0

    @pytest.mark.parametrize("uris", ["abc", b"abc", 42, {"ipfs://a"}])
    def test_batch_must_be_a_list(self, ledger, uris):
        with pytest.raises(InvalidBatchSize):
            ledger.mint_batch("admin", uris)

        assert ledger.get_last_id() == 0

    def test_non_string_items_are_dropped(self, ledger):
        ids = ledger.mint_batch("admin", ["ipfs://a", None, 7, "ipfs://c"])

        assert ids == [1, 2]
        assert ledger.get_uri(2) == "ipfs://c"

    def test_max_batch(self, ledger):
        ids = ledger.mint_batch("admin", [f"ipfs://{n}" for n in range(50)])

        assert ids == list(range(1, 51))

    def test_non_admin_rejected(self, ledger):
        with pytest.raises(NotAuthorized):
            ledger.mint_batch("mallory", ["ipfs://a"])

        assert ledger.get_last_id() == 0

    def test_authorization_checked_before_size(self, ledger):
        with pytest.raises(NotAuthorized):
            ledger.mint_batch("mallory", [])

    def test_one_event_per_minted_item(self, ledger):
        ledger.mint_batch("admin", ["ipfs://a", "", "ipfs://c"])

        events = ledger.get_events()
        assert [e.event.token_id for e in events] == [1, 2]
        assert [e.sequence_number for e in events] == [1, 2]
