"""Permanent retirement (burn) of tokens."""

from ..domain.errors import BurnFailed, NotOwner, TokenNotFound
from ..domain.events import TokenBurnedEvent
from ..repositories.interfaces import RepositoryContainer
from ..utils.logging_config import get_logger

logger = get_logger('ledger')


class BurnRegistry:
    """Retires tokens. The burned flag only ever goes from False to True.

    The ownership row of a burned token stays in place; readers treat a
    burned token as having no resolvable owner.
    """

    def __init__(self, repos: RepositoryContainer):
        self._repos = repos

    def is_burned(self, token_id: int) -> bool:
        return self._repos.burns.is_burned(token_id)

    def burn(self, caller: str, token_id: int) -> bool:
        """
        Retire token_id on behalf of its holder.

        Raises:
            TokenNotFound: the token was never minted
            NotOwner: caller is not the holder on record
            BurnFailed: the token is already retired
        """
        holder = self._repos.ownership.get_holder(token_id)
        if holder is None:
            raise TokenNotFound(f"Token {token_id} does not exist", token_id=token_id)
        if caller != holder:
            raise NotOwner(
                f"'{caller}' does not own token {token_id}", token_id=token_id
            )
        if self._repos.burns.is_burned(token_id):
            raise BurnFailed(f"Token {token_id} is already retired", token_id=token_id)

        self._repos.burns.mark_burned(token_id)
        self._repos.events.append(
            TokenBurnedEvent(token_id=token_id, actor=caller, owner=holder)
        )
        logger.info(f"Token {token_id} retired by {caller}")
        return True
