"""Tests for enumeration, read accessors and unit-of-work rollback."""

import copy
from types import SimpleNamespace

import pytest

from carbon_ledger.core.ledger import CarbonLedger
from carbon_ledger.domain.errors import InvalidPageRequest, TokenNotFound
from carbon_ledger.domain.tokens import BurnStatus, TokenRecord
from carbon_ledger.repositories import memory_impl


@pytest.fixture
def three_tokens(ledger):
    ledger.mint_batch("admin", ["ipfs://a", "ipfs://b", "ipfs://c"])
    ledger.transfer("bob", 2, "admin", "bob")
    ledger.burn("admin", 3)
    return ledger


class TestListRange:
    """Test cases for window enumeration."""

    def test_full_window(self, three_tokens):
        records = three_tokens.list_range(1, 3)

        assert records == [
            TokenRecord(id=1, uri="ipfs://a", owner="admin", burned=False),
            TokenRecord(id=2, uri="ipfs://b", owner="bob", burned=False),
            TokenRecord(id=3, uri="ipfs://c", owner=None, burned=True),
        ]

    def test_partial_window(self, three_tokens):
        assert [r.id for r in three_tokens.list_range(2, 2)] == [2, 3]

    def test_empty_window(self, three_tokens):
        assert three_tokens.list_range(1, 0) == []

    def test_window_past_last_id_strict(self, three_tokens):
        with pytest.raises(TokenNotFound) as exc_info:
            three_tokens.list_range(2, 5)

        assert exc_info.value.token_id == 4

    def test_window_past_last_id_lenient(self, memory_repos, lenient_ledger):
        lenient_ledger.mint_one("admin", "ipfs://a")

        records = lenient_ledger.list_range(1, 10)

        assert [r.id for r in records] == [1]

    @pytest.mark.parametrize("start,count", [(0, 1), (1, -1), (1, 101)])
    def test_invalid_window(self, three_tokens, start, count):
        with pytest.raises(InvalidPageRequest):
            three_tokens.list_range(start, count)

    def test_configured_page_size(self, memory_repos):
        small = CarbonLedger(memory_repos, admin="admin", max_page_size=2)
        small.mint_batch("admin", ["ipfs://a", "ipfs://b", "ipfs://c"])

        assert len(small.list_range(1, 2)) == 2
        with pytest.raises(InvalidPageRequest):
            small.list_range(1, 3)


class TestHoles:
    """An id at or below the high-water mark without metadata."""

    @pytest.fixture
    def holed_repos(self, memory_repos):
        # Simulates storage edited behind the ledger's back
        memory_repos.counter.set_last_id(1)
        memory_repos.ownership.set_holder(1, "admin")
        memory_repos.metadata.set_uri(1, "ipfs://a")
        memory_repos.counter.set_last_id(3)
        memory_repos.ownership.set_holder(3, "admin")
        memory_repos.metadata.set_uri(3, "ipfs://c")
        return memory_repos

    def test_strict_raises_for_hole(self, holed_repos):
        ledger = CarbonLedger(holed_repos, admin="admin")

        with pytest.raises(TokenNotFound) as exc_info:
            ledger.list_range(1, 3)
        assert exc_info.value.token_id == 2

        with pytest.raises(TokenNotFound):
            ledger.all_burn_statuses()

    def test_lenient_skips_hole(self, holed_repos):
        ledger = CarbonLedger(holed_repos, admin="admin", strict_enumeration=False)

        assert [r.id for r in ledger.list_range(1, 3)] == [1, 3]
        assert [s.id for s in ledger.all_burn_statuses()] == [1, 3]


class TestAggregates:
    def test_total_minted(self, three_tokens):
        assert three_tokens.total_minted() == 3
        assert three_tokens.get_last_id() == 3

    def test_all_burn_statuses(self, three_tokens):
        assert three_tokens.all_burn_statuses() == [
            BurnStatus(id=1, burned=False),
            BurnStatus(id=2, burned=False),
            BurnStatus(id=3, burned=True),
        ]

    def test_all_burn_statuses_empty_ledger(self, ledger):
        assert ledger.all_burn_statuses() == []

    def test_get_token(self, three_tokens):
        assert three_tokens.get_token(2) == TokenRecord(
            id=2, uri="ipfs://b", owner="bob", burned=False
        )
        assert three_tokens.get_token(9) is None

    def test_unminted_reads(self, ledger):
        assert ledger.get_uri(1) is None
        assert ledger.get_owner(1) is None
        assert ledger.is_burned(1) is False


class TestBatchMetadata:
    def test_seeded_description(self, ledger):
        assert ledger.get_batch_metadata(7) == "Verra VCS 2024 vintage, Kasigau corridor"

    def test_missing_description(self, ledger):
        assert ledger.get_batch_metadata(8) is None


class TestEvents:
    def test_paging(self, three_tokens):
        first = three_tokens.get_events(limit=2)
        rest = three_tokens.get_events(since_seq=first[-1].sequence_number)

        sequences = [e.sequence_number for e in first + rest]
        assert sequences == list(range(1, len(sequences) + 1))

    def test_filter_by_token(self, three_tokens):
        events = three_tokens.get_events(token_id=3)

        assert [e.event_type for e in events] == ["token_minted", "token_burned"]


class TestUnitOfWork:
    """A call that fails part-way leaves nothing behind."""

    def test_reads_take_no_snapshot(self, three_tokens, monkeypatch):
        copies = []

        def counting_copy(value):
            copies.append(value)
            return copy.copy(value)

        monkeypatch.setattr(memory_impl, "copy", SimpleNamespace(copy=counting_copy))

        three_tokens.get_uri(1)
        three_tokens.list_range(1, 3)
        three_tokens.get_events()
        assert copies == []

        three_tokens.mint_one("admin", "ipfs://d")
        assert copies

    def test_read_after_failed_write_sees_committed_state(self, ledger, memory_repos, monkeypatch):
        ledger.mint_one("admin", "ipfs://a")

        def broken_set_uri(token_id, uri):
            raise RuntimeError("metadata unavailable")

        monkeypatch.setattr(memory_repos.metadata, "set_uri", broken_set_uri)

        with pytest.raises(RuntimeError):
            ledger.mint_one("admin", "ipfs://b")

        assert ledger.get_owner(2) is None
        assert ledger.get_last_id() == 1

    def test_storage_failure_rolls_back(self, ledger, memory_repos, monkeypatch):
        ledger.mint_one("admin", "ipfs://a")

        def broken_append(event):
            raise RuntimeError("event log unavailable")

        monkeypatch.setattr(memory_repos.events, "append", broken_append)

        with pytest.raises(RuntimeError):
            ledger.mint_one("admin", "ipfs://b")

        assert memory_repos.counter.get_last_id() == 1
        assert memory_repos.ownership.get_holder(2) is None
        assert memory_repos.metadata.get_uri(2) is None

    def test_failed_transfer_after_partial_write(self, ledger, memory_repos, monkeypatch):
        ledger.mint_one("admin", "ipfs://a")

        def broken_append(event):
            raise RuntimeError("event log unavailable")

        monkeypatch.setattr(memory_repos.events, "append", broken_append)

        with pytest.raises(RuntimeError):
            ledger.transfer("bob", 1, "admin", "bob")

        assert memory_repos.ownership.get_holder(1) == "admin"
