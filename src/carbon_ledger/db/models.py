"""SQLAlchemy models for the carbon ledger.

Each ledger map lives in its own table keyed by token id, mirroring the
OwnershipLedger / MetadataStore / BurnRegistry split. Rows are never deleted.
"""

from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import (
    Column,
    String,
    Integer,
    DateTime,
    Boolean,
    JSON,
    Index,
)
from sqlalchemy.types import TypeDecorator, CHAR

from .database import Base
from ..core.validation import MAX_PRINCIPAL_LENGTH


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GUID(TypeDecorator):
    """Platform-independent GUID type stored as CHAR(36)."""

    impl = CHAR(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None or isinstance(value, UUID):
            return value
        return UUID(value)


class LedgerCounter(Base):
    """Named monotone counters; holds the token id high-water mark."""

    __tablename__ = "ledger_counters"

    name = Column(String(64), primary_key=True)
    value = Column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<LedgerCounter(name='{self.name}', value={self.value})>"


class TokenOwner(Base):
    """Current holder of a minted token."""

    __tablename__ = "token_owners"

    token_id = Column(Integer, primary_key=True, autoincrement=False)
    principal = Column(String(MAX_PRINCIPAL_LENGTH), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (Index("ix_token_owner_principal", "principal"),)

    def __repr__(self) -> str:
        return f"<TokenOwner(token_id={self.token_id}, principal='{self.principal}')>"


class TokenMetadata(Base):
    """Opaque metadata URI of a minted token."""

    __tablename__ = "token_metadata"

    token_id = Column(Integer, primary_key=True, autoincrement=False)
    uri = Column(String(256), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


class TokenBurn(Base):
    """Retirement marker; presence of a row means the token is burned."""

    __tablename__ = "token_burns"

    token_id = Column(Integer, primary_key=True, autoincrement=False)
    burned = Column(Boolean, nullable=False, default=True)
    burned_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


class BatchMetadata(Base):
    """Descriptive text per batch id. Seeded externally, never written by the ledger."""

    __tablename__ = "batch_metadata"

    batch_id = Column(Integer, primary_key=True, autoincrement=False)
    description = Column(String(256), nullable=False)


class LedgerEventRecord(Base):
    """Append-only log of ledger mutations."""

    __tablename__ = "ledger_events"

    seq = Column(Integer, primary_key=True, autoincrement=False)
    event_id = Column(GUID(), nullable=False, unique=True)
    type = Column(String(50), nullable=False)
    token_id = Column(Integer, nullable=False)
    actor = Column(String(MAX_PRINCIPAL_LENGTH), nullable=False)
    payload_json = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (Index("ix_ledger_events_token_seq", "token_id", "seq"),)

    def __repr__(self) -> str:
        return f"<LedgerEventRecord(seq={self.seq}, type='{self.type}', token_id={self.token_id})>"
