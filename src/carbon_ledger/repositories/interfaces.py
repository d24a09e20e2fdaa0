"""Abstract repository interfaces for the ledger's storage primitives."""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from ..domain.events import BaseLedgerEvent, EventEnvelope


class BaseRepository(ABC):
    """Base repository interface with transaction hooks."""

    def begin(self, readonly: bool = False) -> None:
        """Start a unit of work. Storage with native transactions needs nothing.

        A readonly unit of work promises not to write, so there is nothing to
        roll back.
        """

    @abstractmethod
    def commit(self) -> None:
        """Commit the current unit of work."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard every change made since the unit of work began."""


class CounterRepository(BaseRepository):
    """Repository interface for the token id high-water mark."""

    @abstractmethod
    def get_last_id(self) -> int:
        """Return the highest allocated token id, 0 before the first mint."""

    @abstractmethod
    def set_last_id(self, value: int) -> None:
        """Record a new high-water mark."""


class OwnershipRepository(BaseRepository):
    """Repository interface for the id -> holder map."""

    @abstractmethod
    def get_holder(self, token_id: int) -> Optional[str]:
        """Holder on record, kept even after the token is burned."""

    @abstractmethod
    def set_holder(self, token_id: int, principal: str) -> None:
        """Create or reassign the holder of a token."""


class MetadataRepository(BaseRepository):
    """Repository interface for the id -> URI map."""

    @abstractmethod
    def get_uri(self, token_id: int) -> Optional[str]:
        """Stored URI, None if the token was never minted."""

    @abstractmethod
    def set_uri(self, token_id: int, uri: str) -> None:
        """Create or overwrite the URI of a token."""


class BurnRepository(BaseRepository):
    """Repository interface for the id -> retired flag map."""

    @abstractmethod
    def is_burned(self, token_id: int) -> bool:
        """True once the token has been retired; absence means False."""

    @abstractmethod
    def mark_burned(self, token_id: int) -> None:
        """Retire a token. There is no inverse operation."""


class BatchMetadataRepository(BaseRepository):
    """Read-only repository for externally seeded batch descriptions."""

    @abstractmethod
    def get(self, batch_id: int) -> Optional[str]:
        """Description of a batch, None if nothing was seeded for it."""

    @abstractmethod
    def list_all(self) -> Dict[int, str]:
        """Every seeded batch description keyed by batch id."""


class EventRepository(BaseRepository):
    """Repository interface for the append-only ledger event log."""

    @abstractmethod
    def append(self, event: BaseLedgerEvent) -> EventEnvelope:
        """Store an event under the next sequence number."""

    @abstractmethod
    def list_events(
        self,
        since_seq: int = 0,
        limit: int = 100,
        token_id: Optional[int] = None,
    ) -> List[EventEnvelope]:
        """Events with sequence number greater than since_seq, oldest first."""

    @abstractmethod
    def latest_sequence(self) -> int:
        """Highest stored sequence number, 0 for an empty log."""


class RepositoryContainer:
    """Container for all ledger repositories to support dependency injection."""

    def __init__(
        self,
        counter_repo: CounterRepository,
        ownership_repo: OwnershipRepository,
        metadata_repo: MetadataRepository,
        burn_repo: BurnRepository,
        batch_metadata_repo: BatchMetadataRepository,
        event_repo: EventRepository,
    ):
        self.counter = counter_repo
        self.ownership = ownership_repo
        self.metadata = metadata_repo
        self.burns = burn_repo
        self.batch_metadata = batch_metadata_repo
        self.events = event_repo

    def _all(self) -> List[BaseRepository]:
        return [
            self.counter,
            self.ownership,
            self.metadata,
            self.burns,
            self.batch_metadata,
            self.events,
        ]

    def begin(self, readonly: bool = False) -> None:
        for repo in self._all():
            repo.begin(readonly)

    def commit(self) -> None:
        for repo in self._all():
            repo.commit()

    def rollback(self) -> None:
        for repo in self._all():
            repo.rollback()
