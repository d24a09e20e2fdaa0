"""Read-side enumeration over the ledger maps."""

from typing import List, Optional

from .allocator import IdentifierAllocator
from .metadata import MetadataStore
from .pagination import generate_ids
from .validation import require_page_window
from ..domain.errors import TokenNotFound
from ..domain.tokens import BurnStatus, TokenRecord
from ..repositories.interfaces import RepositoryContainer
from ..utils.logging_config import get_logger

logger = get_logger('ledger')


class EnumerationService:
    """Builds aggregate records for windows of token ids.

    Each generated id is checked for existence. With ``strict`` set, a hole in
    the window (an id that was never minted) raises TokenNotFound; otherwise
    holes are left out of the result.
    """

    def __init__(
        self,
        repos: RepositoryContainer,
        allocator: IdentifierAllocator,
        metadata: MetadataStore,
        strict: bool = True,
        max_page_size: int = 100,
    ):
        self._repos = repos
        self._allocator = allocator
        self._metadata = metadata
        self.strict = strict
        self.max_page_size = max_page_size

    def get_token(self, token_id: int) -> Optional[TokenRecord]:
        uri = self._metadata.get_uri(token_id)
        if uri is None:
            return None
        return TokenRecord(
            id=token_id,
            uri=uri,
            owner=self._metadata.resolve_owner(token_id),
            burned=self._repos.burns.is_burned(token_id),
        )

    def total_minted(self) -> int:
        return self._allocator.current()

    def _hole(self, token_id: int) -> None:
        if self.strict:
            raise TokenNotFound(
                f"Token {token_id} has not been minted", token_id=token_id
            )
        logger.debug(f"Skipping unminted token id {token_id}")

    def list_range(self, start: int, count: int) -> List[TokenRecord]:
        """Records for ids start .. start+count-1."""
        require_page_window(start, count, self.max_page_size)

        records: List[TokenRecord] = []
        for token_id in generate_ids(start, count):
            record = self.get_token(token_id)
            if record is None:
                self._hole(token_id)
                continue
            records.append(record)
        return records

    def all_burn_statuses(self) -> List[BurnStatus]:
        """Burn flag of every id from 1 to the high-water mark."""
        statuses: List[BurnStatus] = []
        for token_id in generate_ids(1, self.total_minted()):
            if self._metadata.get_uri(token_id) is None:
                self._hole(token_id)
                continue
            statuses.append(
                BurnStatus(id=token_id, burned=self._repos.burns.is_burned(token_id))
            )
        return statuses
