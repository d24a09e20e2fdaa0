"""In-memory implementations of repository interfaces for tests and embedding."""

import copy
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from .interfaces import (
    BatchMetadataRepository,
    BurnRepository,
    CounterRepository,
    EventRepository,
    MetadataRepository,
    OwnershipRepository,
    RepositoryContainer,
)
from ..domain.events import BaseLedgerEvent, EventEnvelope


class BaseMemoryRepository:
    """Base in-memory repository with snapshot rollback.

    Subclasses list the attributes holding their state in ``_state_attrs``;
    ``begin`` copies them and ``rollback`` puts the copies back. Readonly
    units of work skip the copy.
    """

    _state_attrs: Tuple[str, ...] = ()

    def __init__(self):
        self._snapshot: Optional[Dict[str, Any]] = None

    def begin(self, readonly: bool = False) -> None:
        if readonly:
            self._snapshot = None
            return
        self._snapshot = {
            name: copy.copy(getattr(self, name)) for name in self._state_attrs
        }

    def commit(self) -> None:
        self._snapshot = None

    def rollback(self) -> None:
        if self._snapshot is None:
            return
        for name, value in self._snapshot.items():
            setattr(self, name, value)
        self._snapshot = None


class MemoryCounterRepository(BaseMemoryRepository, CounterRepository):
    """In-memory implementation of CounterRepository."""

    _state_attrs = ("_last_id",)

    def __init__(self, last_id: int = 0):
        super().__init__()
        self._last_id = last_id

    def get_last_id(self) -> int:
        return self._last_id

    def set_last_id(self, value: int) -> None:
        self._last_id = value


class MemoryOwnershipRepository(BaseMemoryRepository, OwnershipRepository):
    """In-memory implementation of OwnershipRepository."""

    _state_attrs = ("_holders",)

    def __init__(self):
        super().__init__()
        self._holders: Dict[int, str] = {}

    def get_holder(self, token_id: int) -> Optional[str]:
        return self._holders.get(token_id)

    def set_holder(self, token_id: int, principal: str) -> None:
        self._holders[token_id] = principal


class MemoryMetadataRepository(BaseMemoryRepository, MetadataRepository):
    """In-memory implementation of MetadataRepository."""

    _state_attrs = ("_uris",)

    def __init__(self):
        super().__init__()
        self._uris: Dict[int, str] = {}

    def get_uri(self, token_id: int) -> Optional[str]:
        return self._uris.get(token_id)

    def set_uri(self, token_id: int, uri: str) -> None:
        self._uris[token_id] = uri


class MemoryBurnRepository(BaseMemoryRepository, BurnRepository):
    """In-memory implementation of BurnRepository."""

    _state_attrs = ("_burned",)

    def __init__(self):
        super().__init__()
        self._burned: Dict[int, bool] = {}

    def is_burned(self, token_id: int) -> bool:
        return self._burned.get(token_id, False)

    def mark_burned(self, token_id: int) -> None:
        self._burned[token_id] = True


class MemoryBatchMetadataRepository(BaseMemoryRepository, BatchMetadataRepository):
    """In-memory implementation of BatchMetadataRepository."""

    def __init__(self, seed: Optional[Dict[int, str]] = None):
        super().__init__()
        self._descriptions: Dict[int, str] = dict(seed or {})

    def get(self, batch_id: int) -> Optional[str]:
        return self._descriptions.get(batch_id)

    def list_all(self) -> Dict[int, str]:
        return dict(self._descriptions)


class MemoryEventRepository(BaseMemoryRepository, EventRepository):
    """In-memory implementation of EventRepository."""

    _state_attrs = ("_envelopes",)

    def __init__(self):
        super().__init__()
        self._envelopes: List[EventEnvelope] = []

    def append(self, event: BaseLedgerEvent) -> EventEnvelope:
        envelope = EventEnvelope(
            sequence_number=self.latest_sequence() + 1,
            stored_at=datetime.now(timezone.utc),
            event=event,
        )
        self._envelopes.append(envelope)
        return envelope

    def list_events(
        self,
        since_seq: int = 0,
        limit: int = 100,
        token_id: Optional[int] = None,
    ) -> List[EventEnvelope]:
        envelopes = [e for e in self._envelopes if e.sequence_number > since_seq]
        if token_id is not None:
            envelopes = [e for e in envelopes if e.event.token_id == token_id]
        return envelopes[:limit]

    def latest_sequence(self) -> int:
        if not self._envelopes:
            return 0
        return self._envelopes[-1].sequence_number


def create_memory_container(
    batch_metadata: Optional[Dict[int, str]] = None,
) -> RepositoryContainer:
    """Build a container backed entirely by in-memory repositories."""
    return RepositoryContainer(
        counter_repo=MemoryCounterRepository(),
        ownership_repo=MemoryOwnershipRepository(),
        metadata_repo=MemoryMetadataRepository(),
        burn_repo=MemoryBurnRepository(),
        batch_metadata_repo=MemoryBatchMetadataRepository(batch_metadata),
        event_repo=MemoryEventRepository(),
    )
