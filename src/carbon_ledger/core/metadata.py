"""Owner-driven updates of a token's metadata URI."""

from typing import Optional

from .validation import require_valid_uri
from ..domain.errors import NotOwner, TokenNotFound
from ..domain.events import TokenUriUpdatedEvent
from ..repositories.interfaces import RepositoryContainer
from ..utils.logging_config import get_logger

logger = get_logger('ledger')


class MetadataStore:
    """Reads and validated writes of token URIs. No history is kept."""

    def __init__(self, repos: RepositoryContainer):
        self._repos = repos

    def get_uri(self, token_id: int) -> Optional[str]:
        return self._repos.metadata.get_uri(token_id)

    def resolve_owner(self, token_id: int) -> Optional[str]:
        """Current owner, or None for unminted and burned tokens."""
        if self._repos.burns.is_burned(token_id):
            return None
        return self._repos.ownership.get_holder(token_id)

    def update_uri(self, caller: str, token_id: int, new_uri: str) -> bool:
        """
        Overwrite the URI of token_id.

        Raises:
            TokenNotFound: the token was never minted
            NotOwner: caller is not the current owner (burned tokens have none)
            InvalidUri: new_uri is not ASCII or not 1..256 characters long
        """
        if self._repos.metadata.get_uri(token_id) is None:
            raise TokenNotFound(f"Token {token_id} does not exist", token_id=token_id)
        if caller != self.resolve_owner(token_id):
            raise NotOwner(
                f"'{caller}' does not own token {token_id}", token_id=token_id
            )
        require_valid_uri(new_uri, token_id=token_id)

        self._repos.metadata.set_uri(token_id, new_uri)
        self._repos.events.append(
            TokenUriUpdatedEvent(token_id=token_id, actor=caller, uri=new_uri)
        )
        logger.info(f"Token {token_id} URI updated by {caller}")
        return True
