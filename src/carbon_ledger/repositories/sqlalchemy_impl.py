"""SQLAlchemy concrete implementations of repository interfaces."""

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Dict, Iterator, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .interfaces import (
    BatchMetadataRepository,
    BurnRepository,
    CounterRepository,
    EventRepository,
    MetadataRepository,
    OwnershipRepository,
    RepositoryContainer,
)
from ..db.models import (
    BatchMetadata,
    LedgerCounter,
    LedgerEventRecord,
    TokenBurn,
    TokenMetadata,
    TokenOwner,
)
from ..domain.errors import RepositoryError
from ..domain.events import BaseLedgerEvent, EventEnvelope, deserialize_event

LAST_TOKEN_ID = "last_token_id"


@contextmanager
def _storage_errors(action: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as e:
        raise RepositoryError(f"Failed to {action}: {e}") from e


class BaseSQLAlchemyRepository:
    """Base SQLAlchemy repository implementation.

    All repositories in one container share a session, so committing any of
    them commits the whole unit of work. Writes are flushed immediately so
    later reads in the same unit of work observe them.
    """

    def __init__(self, session: Session):
        self._session = session

    def begin(self, readonly: bool = False) -> None:
        pass

    def commit(self) -> None:
        with _storage_errors("commit ledger transaction"):
            self._session.commit()

    def rollback(self) -> None:
        self._session.rollback()

    def _write(self, entity, action: str) -> None:
        with _storage_errors(action):
            self._session.add(entity)
            self._session.flush()


class SQLAlchemyCounterRepository(BaseSQLAlchemyRepository, CounterRepository):
    """SQLAlchemy implementation of CounterRepository."""

    def get_last_id(self) -> int:
        with _storage_errors("read token counter"):
            row = self._session.get(LedgerCounter, LAST_TOKEN_ID)
        return row.value if row else 0

    def set_last_id(self, value: int) -> None:
        with _storage_errors("read token counter"):
            row = self._session.get(LedgerCounter, LAST_TOKEN_ID)
        if row is None:
            row = LedgerCounter(name=LAST_TOKEN_ID, value=value)
        else:
            row.value = value
        self._write(row, "advance token counter")


class SQLAlchemyOwnershipRepository(BaseSQLAlchemyRepository, OwnershipRepository):
    """SQLAlchemy implementation of OwnershipRepository."""

    def get_holder(self, token_id: int) -> Optional[str]:
        with _storage_errors("read token owner"):
            row = self._session.get(TokenOwner, token_id)
        return row.principal if row else None

    def set_holder(self, token_id: int, principal: str) -> None:
        with _storage_errors("read token owner"):
            row = self._session.get(TokenOwner, token_id)
        if row is None:
            row = TokenOwner(token_id=token_id, principal=principal)
        else:
            row.principal = principal
            row.updated_at = datetime.now(timezone.utc)
        self._write(row, "record token owner")


class SQLAlchemyMetadataRepository(BaseSQLAlchemyRepository, MetadataRepository):
    """SQLAlchemy implementation of MetadataRepository."""

    def get_uri(self, token_id: int) -> Optional[str]:
        with _storage_errors("read token metadata"):
            row = self._session.get(TokenMetadata, token_id)
        return row.uri if row else None

    def set_uri(self, token_id: int, uri: str) -> None:
        with _storage_errors("read token metadata"):
            row = self._session.get(TokenMetadata, token_id)
        if row is None:
            row = TokenMetadata(token_id=token_id, uri=uri)
        else:
            row.uri = uri
            row.updated_at = datetime.now(timezone.utc)
        self._write(row, "record token metadata")


class SQLAlchemyBurnRepository(BaseSQLAlchemyRepository, BurnRepository):
    """SQLAlchemy implementation of BurnRepository."""

    def is_burned(self, token_id: int) -> bool:
        with _storage_errors("read burn flag"):
            row = self._session.get(TokenBurn, token_id)
        return bool(row and row.burned)

    def mark_burned(self, token_id: int) -> None:
        with _storage_errors("read burn flag"):
            row = self._session.get(TokenBurn, token_id)
        if row is None:
            row = TokenBurn(token_id=token_id, burned=True)
        else:
            row.burned = True
        self._write(row, "record burn flag")


class SQLAlchemyBatchMetadataRepository(BaseSQLAlchemyRepository, BatchMetadataRepository):
    """SQLAlchemy implementation of BatchMetadataRepository."""

    def get(self, batch_id: int) -> Optional[str]:
        with _storage_errors("read batch metadata"):
            row = self._session.get(BatchMetadata, batch_id)
        return row.description if row else None

    def list_all(self) -> Dict[int, str]:
        with _storage_errors("list batch metadata"):
            rows = self._session.execute(
                select(BatchMetadata).order_by(BatchMetadata.batch_id)
            ).scalars().all()
        return {row.batch_id: row.description for row in rows}


class SQLAlchemyEventRepository(BaseSQLAlchemyRepository, EventRepository):
    """SQLAlchemy implementation of EventRepository."""

    def append(self, event: BaseLedgerEvent) -> EventEnvelope:
        """
        Append a new event with automatic sequence numbering.

        Raises:
            RepositoryError: If the event could not be stored
        """
        next_seq = self.latest_sequence() + 1

        record = LedgerEventRecord(
            seq=next_seq,
            event_id=event.event_id,
            type=event.event_type.value,
            token_id=event.token_id,
            actor=event.actor,
            payload_json=event.model_dump(mode="json"),
            created_at=event.timestamp,
        )
        self._write(record, "append ledger event")

        return EventEnvelope(
            sequence_number=next_seq, stored_at=record.created_at, event=event
        )

    def list_events(
        self,
        since_seq: int = 0,
        limit: int = 100,
        token_id: Optional[int] = None,
    ) -> List[EventEnvelope]:
        query = select(LedgerEventRecord).where(LedgerEventRecord.seq > since_seq)
        if token_id is not None:
            query = query.where(LedgerEventRecord.token_id == token_id)
        query = query.order_by(LedgerEventRecord.seq).limit(limit)

        with _storage_errors("query ledger events"):
            records = self._session.execute(query).scalars().all()

        envelopes = []
        for record in records:
            try:
                event = deserialize_event(record.type, record.payload_json)
            except ValueError as e:
                raise RepositoryError(
                    f"Failed to deserialize ledger event {record.seq}: {e}"
                ) from e
            envelopes.append(
                EventEnvelope(
                    sequence_number=record.seq, stored_at=record.created_at, event=event
                )
            )
        return envelopes

    def latest_sequence(self) -> int:
        with _storage_errors("read latest event sequence"):
            result = self._session.execute(
                select(func.coalesce(func.max(LedgerEventRecord.seq), 0))
            ).scalar()
        return result or 0


def create_sqlalchemy_container(session: Session) -> RepositoryContainer:
    """Build a container whose repositories share one session."""
    return RepositoryContainer(
        counter_repo=SQLAlchemyCounterRepository(session),
        ownership_repo=SQLAlchemyOwnershipRepository(session),
        metadata_repo=SQLAlchemyMetadataRepository(session),
        burn_repo=SQLAlchemyBurnRepository(session),
        batch_metadata_repo=SQLAlchemyBatchMetadataRepository(session),
        event_repo=SQLAlchemyEventRepository(session),
    )
