"""Concurrent minting across threads and sessions."""

import threading

import pytest
from sqlalchemy.orm import sessionmaker

from carbon_ledger.core.ledger import CarbonLedger
from carbon_ledger.db.database import create_database_engine, init_db
from carbon_ledger.repositories.sqlalchemy_impl import create_sqlalchemy_container
from tests.helpers.concurrency import run_in_threads, session_worker

pytestmark = pytest.mark.integration

THREADS = 8
MINTS_PER_THREAD = 5


@pytest.fixture
def file_db(tmp_path):
    """Session factory over a WAL-mode SQLite file."""
    engine = create_database_engine(f"sqlite:///{tmp_path / 'concurrent.db'}")
    init_db(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


class TestConcurrentMinting:
    """Ids handed out under contention stay distinct and gap-free."""

    def test_sql_ledgers_share_the_process_lock(self, file_db):
        minted = []
        minted_lock = threading.Lock()
        barrier = threading.Barrier(THREADS)

        def mint_many(session):
            ledger = CarbonLedger(create_sqlalchemy_container(session), admin="admin")
            barrier.wait()
            for n in range(MINTS_PER_THREAD):
                token_id = ledger.mint_one("admin", f"ipfs://{threading.get_ident()}/{n}")
                with minted_lock:
                    minted.append(token_id)

        errors = run_in_threads(
            [session_worker(file_db, mint_many) for _ in range(THREADS)],
            join_timeout=30.0,
        )

        assert errors == [None] * THREADS
        total = THREADS * MINTS_PER_THREAD
        assert sorted(minted) == list(range(1, total + 1))

        session = file_db()
        try:
            ledger = CarbonLedger(create_sqlalchemy_container(session), admin="admin")
            assert ledger.get_last_id() == total
            events = ledger.get_events(limit=total + 10)
            assert [e.sequence_number for e in events] == list(range(1, total + 1))
        finally:
            session.close()

    def test_memory_ledger_batches(self, ledger):
        results = []
        results_lock = threading.Lock()

        def mint_batch():
            ids = ledger.mint_batch("admin", ["ipfs://x"] * 10)
            with results_lock:
                results.append(ids)

        errors = run_in_threads([mint_batch for _ in range(THREADS)])

        assert errors == [None] * THREADS
        # Each batch is allocated as one contiguous run
        for ids in results:
            assert ids == list(range(ids[0], ids[0] + 10))
        assert sorted(i for ids in results for i in ids) == list(range(1, THREADS * 10 + 1))
