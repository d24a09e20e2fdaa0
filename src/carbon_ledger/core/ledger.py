"""CarbonLedger facade.

Every public call takes the ledger lock and runs as one unit of work over the
repositories: it commits on success and rolls back on any exception, so a
failed precondition never leaves a partial change behind. Reads run as readonly
units of work and take no rollback snapshot.
"""

import threading
from contextlib import contextmanager
from typing import Iterator, List, Optional, Sequence

from .allocator import IdentifierAllocator
from .enumeration import EnumerationService
from .metadata import MetadataStore
from .minting import MintOrchestrator
from .retirement import BurnRegistry
from .transfers import TransferEngine
from ..config import get_config
from ..domain.errors import LedgerError
from ..domain.events import EventEnvelope
from ..domain.tokens import BurnStatus, TokenRecord
from ..repositories.interfaces import RepositoryContainer
from ..utils.logging_config import get_logger, log_exception

logger = get_logger('ledger')

# One lock per process: all ledgers built over the shared database serialize
# on it, including those created per HTTP request.
LEDGER_LOCK = threading.RLock()


class CarbonLedger:
    """Public entry point for the token lifecycle."""

    def __init__(
        self,
        repositories: RepositoryContainer,
        admin: str,
        strict_enumeration: bool = True,
        max_page_size: int = 100,
        lock: Optional[threading.RLock] = None,
    ):
        self.repos = repositories
        self.admin = admin
        self._lock = lock if lock is not None else LEDGER_LOCK

        self._allocator = IdentifierAllocator(repositories.counter)
        self._metadata = MetadataStore(repositories)
        self._minting = MintOrchestrator(repositories, self._allocator, admin)
        self._transfers = TransferEngine(repositories)
        self._burns = BurnRegistry(repositories)
        self._enumeration = EnumerationService(
            repositories,
            self._allocator,
            self._metadata,
            strict=strict_enumeration,
            max_page_size=max_page_size,
        )

    @classmethod
    def from_config(cls, repositories: RepositoryContainer, config=None) -> "CarbonLedger":
        """Build a ledger using the ledger section of the application config."""
        if config is None:
            config = get_config()
        return cls(
            repositories,
            admin=config.ledger.admin_principal,
            strict_enumeration=config.ledger.strict_enumeration,
            max_page_size=config.ledger.max_page_size,
        )

    @contextmanager
    def _unit_of_work(self, operation: str, readonly: bool = False) -> Iterator[None]:
        with self._lock:
            self.repos.begin(readonly)
            try:
                yield
                self.repos.commit()
            except LedgerError as e:
                self.repos.rollback()
                logger.info(f"{operation} rejected: {e.code.value}: {e.message}")
                raise
            except Exception as e:
                self.repos.rollback()
                log_exception('ledger', e, {'operation': operation})
                raise

    # Mutations

    def mint_one(self, caller: str, uri: str) -> int:
        with self._unit_of_work("mint_one"):
            return self._minting.mint_one(caller, uri)

    def mint_batch(self, caller: str, uris: Sequence[str]) -> List[int]:
        with self._unit_of_work("mint_batch"):
            return self._minting.mint_batch(caller, uris)

    def transfer(self, caller: str, token_id: int, sender: str, recipient: str) -> bool:
        with self._unit_of_work("transfer"):
            return self._transfers.transfer(caller, token_id, sender, recipient)

    def burn(self, caller: str, token_id: int) -> bool:
        with self._unit_of_work("burn"):
            return self._burns.burn(caller, token_id)

    def update_uri(self, caller: str, token_id: int, new_uri: str) -> bool:
        with self._unit_of_work("update_uri"):
            return self._metadata.update_uri(caller, token_id, new_uri)

    # Reads

    def get_uri(self, token_id: int) -> Optional[str]:
        with self._unit_of_work("get_uri", readonly=True):
            return self._metadata.get_uri(token_id)

    def get_owner(self, token_id: int) -> Optional[str]:
        """Current owner; None for unminted and burned tokens."""
        with self._unit_of_work("get_owner", readonly=True):
            return self._metadata.resolve_owner(token_id)

    def get_last_id(self) -> int:
        with self._unit_of_work("get_last_id", readonly=True):
            return self._allocator.current()

    def total_minted(self) -> int:
        with self._unit_of_work("total_minted", readonly=True):
            return self._enumeration.total_minted()

    def is_burned(self, token_id: int) -> bool:
        with self._unit_of_work("is_burned", readonly=True):
            return self._burns.is_burned(token_id)

    def get_token(self, token_id: int) -> Optional[TokenRecord]:
        with self._unit_of_work("get_token", readonly=True):
            return self._enumeration.get_token(token_id)

    def list_range(self, start: int, count: int) -> List[TokenRecord]:
        with self._unit_of_work("list_range", readonly=True):
            return self._enumeration.list_range(start, count)

    def all_burn_statuses(self) -> List[BurnStatus]:
        with self._unit_of_work("all_burn_statuses", readonly=True):
            return self._enumeration.all_burn_statuses()

    def get_batch_metadata(self, batch_id: int) -> Optional[str]:
        with self._unit_of_work("get_batch_metadata", readonly=True):
            return self.repos.batch_metadata.get(batch_id)

    def get_events(
        self,
        since_seq: int = 0,
        limit: int = 100,
        token_id: Optional[int] = None,
    ) -> List[EventEnvelope]:
        with self._unit_of_work("get_events", readonly=True):
            return self.repos.events.list_events(
                since_seq=since_seq, limit=limit, token_id=token_id
            )
