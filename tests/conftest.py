"""Pytest configuration and shared fixtures."""

import os
import tempfile
import threading
from pathlib import Path
from typing import Callable, Dict, Generator

# Configuration is read once at import time, so the environment has to be in
# place before anything from carbon_ledger is imported.
_TEST_DIR = Path(tempfile.mkdtemp(prefix="carbon_ledger_tests_"))
_TEST_ENV = {
    "CARBON_LEDGER_DATABASE_URL": f"sqlite:///{_TEST_DIR / 'app.db'}",
    "CARBON_LEDGER_CONFIG_FILE": str(_TEST_DIR / "config.json"),
    "CARBON_LEDGER_JWT_SECRET_KEY": "k7Qx9LmP2vRt8WzYb4NcHd6FgJs3AeUo5KyTq1XiVr0",
    "CARBON_LEDGER_ADMIN": "admin",
    "CARBON_LEDGER_LOG_TO_FILE": "0",
    "CARBON_LEDGER_DEBUG": "0",
}
os.environ.update(_TEST_ENV)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from carbon_ledger.core.ledger import CarbonLedger  # noqa: E402
from carbon_ledger.db.database import init_db  # noqa: E402
from carbon_ledger.repositories.memory_impl import create_memory_container  # noqa: E402
from carbon_ledger.repositories.sqlalchemy_impl import create_sqlalchemy_container  # noqa: E402

ADMIN = "admin"
BATCH_SEED = {7: "Verra VCS 2024 vintage, Kasigau corridor"}


@pytest.fixture
def memory_repos():
    """In-memory repository container with one seeded batch description."""
    return create_memory_container(batch_metadata=BATCH_SEED)


@pytest.fixture
def ledger(memory_repos) -> CarbonLedger:
    """Strict in-memory ledger with its own lock."""
    return CarbonLedger(memory_repos, admin=ADMIN, lock=threading.RLock())


@pytest.fixture
def lenient_ledger(memory_repos) -> CarbonLedger:
    """In-memory ledger that skips holes while enumerating."""
    return CarbonLedger(
        memory_repos, admin=ADMIN, strict_enumeration=False, lock=threading.RLock()
    )


@pytest.fixture
def test_engine():
    """Private in-memory SQLite database with the ledger schema."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def test_db(test_engine):
    """Session factory bound to the test engine."""
    return sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture
def db_session(test_db):
    session = test_db()
    yield session
    session.close()


@pytest.fixture
def sql_ledger(db_session) -> CarbonLedger:
    """Strict ledger backed by SQLAlchemy repositories."""
    return CarbonLedger(
        create_sqlalchemy_container(db_session), admin=ADMIN, lock=threading.RLock()
    )


@pytest.fixture
def client(test_db) -> Generator[TestClient, None, None]:
    """Create a test client with database dependency override."""
    from carbon_ledger.main import app
    from carbon_ledger.db.database import get_db

    def override_get_db():
        # Use a fresh session per request in tests
        db = test_db()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    # Clear overrides to avoid affecting other tests
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> Callable[[str], Dict[str, str]]:
    """Build an Authorization header for a principal."""
    from carbon_ledger.auth.jwt_auth import jwt_manager

    def _headers(principal: str) -> Dict[str, str]:
        token, _ = jwt_manager.create_access_token(principal)
        return {"Authorization": f"Bearer {token}"}

    return _headers
