"""Ledger behaviour over the SQLAlchemy repositories."""

import pytest
from sqlalchemy import select

from carbon_ledger.core.ledger import CarbonLedger
from carbon_ledger.db.models import BatchMetadata, LedgerEventRecord, TokenOwner
from carbon_ledger.domain.errors import BurnFailed, BurnedToken, InvalidUri, RepositoryError
from carbon_ledger.domain.tokens import TokenRecord
from carbon_ledger.repositories.sqlalchemy_impl import (
    SQLAlchemyEventRepository,
    create_sqlalchemy_container,
)

pytestmark = pytest.mark.integration


class TestSQLLedger:
    """Test cases for the ledger persisted through SQLAlchemy."""

    def test_scenario_persists(self, sql_ledger, test_db):
        assert sql_ledger.mint_one("admin", "ipfs://a") == 1
        sql_ledger.transfer("bob", 1, "admin", "bob")
        sql_ledger.burn("bob", 1)

        with pytest.raises(BurnFailed):
            sql_ledger.burn("bob", 1)
        with pytest.raises(BurnedToken):
            sql_ledger.transfer("carol", 1, "bob", "carol")

        # A fresh session sees the committed state
        other = test_db()
        try:
            fresh = CarbonLedger(create_sqlalchemy_container(other), admin="admin")
            assert fresh.get_last_id() == 1
            assert fresh.is_burned(1) is True
            assert fresh.get_owner(1) is None
            assert other.get(TokenOwner, 1).principal == "bob"
        finally:
            other.close()

    def test_batch_with_invalid_item(self, sql_ledger):
        ids = sql_ledger.mint_batch("admin", ["ipfs://a", "é", "ipfs://c"])

        assert ids == [1, 2]
        assert sql_ledger.get_last_id() == 2
        assert sql_ledger.list_range(1, 2) == [
            TokenRecord(id=1, uri="ipfs://a", owner="admin", burned=False),
            TokenRecord(id=2, uri="ipfs://c", owner="admin", burned=False),
        ]

    def test_rejected_mint_rolls_back(self, sql_ledger, db_session):
        sql_ledger.mint_one("admin", "ipfs://a")

        with pytest.raises(InvalidUri):
            sql_ledger.mint_one("admin", "")

        assert sql_ledger.get_last_id() == 1
        assert db_session.execute(select(LedgerEventRecord)).scalars().all()[-1].seq == 1

    def test_storage_failure_rolls_back(self, sql_ledger, db_session, monkeypatch):
        sql_ledger.mint_one("admin", "ipfs://a")

        def broken_append(self, event):
            raise RepositoryError("Failed to append ledger event: disk full")

        monkeypatch.setattr(SQLAlchemyEventRepository, "append", broken_append)

        with pytest.raises(RepositoryError):
            sql_ledger.mint_one("admin", "ipfs://b")

        assert sql_ledger.get_last_id() == 1
        assert sql_ledger.get_uri(2) is None

    def test_update_uri(self, sql_ledger):
        sql_ledger.mint_one("admin", "ipfs://a")
        sql_ledger.update_uri("admin", 1, "ipfs://a2")

        assert sql_ledger.get_uri(1) == "ipfs://a2"

    def test_events_round_trip(self, sql_ledger):
        sql_ledger.mint_one("admin", "ipfs://a")
        sql_ledger.transfer("bob", 1, "admin", "bob")

        events = sql_ledger.get_events()

        assert [e.sequence_number for e in events] == [1, 2]
        assert events[1].event_type == "token_transferred"
        assert events[1].event.sender == "admin"
        assert events[1].event.recipient == "bob"
        assert sql_ledger.get_events(since_seq=1, limit=10)[0].sequence_number == 2

    def test_batch_metadata_is_read_from_storage(self, sql_ledger, db_session):
        db_session.add(BatchMetadata(batch_id=3, description="Gold Standard 2023"))
        db_session.commit()

        assert sql_ledger.get_batch_metadata(3) == "Gold Standard 2023"
        assert sql_ledger.get_batch_metadata(4) is None
        assert sql_ledger.repos.batch_metadata.list_all() == {3: "Gold Standard 2023"}

    def test_all_burn_statuses(self, sql_ledger):
        sql_ledger.mint_batch("admin", ["ipfs://a", "ipfs://b"])
        sql_ledger.burn("admin", 2)

        assert [(s.id, s.burned) for s in sql_ledger.all_burn_statuses()] == [
            (1, False),
            (2, True),
        ]
