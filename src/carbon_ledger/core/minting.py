"""Single and batch minting under the administrative identity."""

from typing import List, Sequence

from .allocator import IdentifierAllocator
from .validation import require_batch_size, require_valid_uri
from ..domain.errors import InvalidUri, NotAuthorized
from ..domain.events import TokenMintedEvent
from ..repositories.interfaces import RepositoryContainer
from ..utils.logging_config import get_logger

logger = get_logger('ledger')


class MintOrchestrator:
    """Creates tokens: allocates an id, records owner, URI and event.

    Every method runs inside the caller's unit of work; nothing here commits.
    """

    def __init__(self, repos: RepositoryContainer, allocator: IdentifierAllocator, admin: str):
        self._repos = repos
        self._allocator = allocator
        self._admin = admin

    def _require_admin(self, caller: str) -> None:
        if caller != self._admin:
            raise NotAuthorized(f"Principal '{caller}' may not mint tokens")

    def _mint(self, caller: str, uri: str) -> int:
        # Validation happens before any write so a rejected URI leaves no trace
        require_valid_uri(uri)

        token_id = self._allocator.next_id()
        self._repos.ownership.set_holder(token_id, caller)
        self._repos.metadata.set_uri(token_id, uri)
        self._repos.events.append(
            TokenMintedEvent(token_id=token_id, actor=caller, owner=caller, uri=uri)
        )
        return token_id

    def mint_one(self, caller: str, uri: str) -> int:
        """
        Mint one token owned by the caller.

        Raises:
            NotAuthorized: caller is not the administrative identity
            InvalidUri: uri is not ASCII or not 1..256 characters long
        """
        self._require_admin(caller)
        token_id = self._mint(caller, uri)
        logger.info(f"Minted token {token_id} for {caller}")
        return token_id

    def mint_batch(self, caller: str, uris: Sequence[str]) -> List[int]:
        """
        Mint one token per URI, in order, and return the ids that succeeded.

        Items that fail validation are dropped from the result without
        aborting the batch or undoing earlier items, so the result can be
        shorter than ``uris`` and does not say which entries were skipped.

        Raises:
            NotAuthorized: caller is not the administrative identity
            InvalidBatchSize: uris is not a list of 1..50 items
        """
        self._require_admin(caller)
        require_batch_size(uris)

        minted: List[int] = []
        for position, uri in enumerate(uris):
            try:
                minted.append(self._mint(caller, uri))
            except InvalidUri as exc:
                logger.warning(f"Batch mint dropped item {position}: {exc}")

        logger.info(
            f"Batch minted {len(minted)} of {len(uris)} tokens for {caller}"
            + (f" (ids {minted[0]}..{minted[-1]})" if minted else "")
        )
        return minted
