"""Claim-based custody transfer."""

from ..domain.errors import BurnedToken, NotOwner
from ..domain.events import TokenTransferredEvent
from ..repositories.interfaces import RepositoryContainer
from ..utils.logging_config import get_logger

logger = get_logger('ledger')


class TransferEngine:
    """Moves a token to a recipient who claims it from a named sender.

    The recipient initiates the transfer, not the sender. No value changes
    hands; only the ownership entry is reassigned.
    """

    def __init__(self, repos: RepositoryContainer):
        self._repos = repos

    def transfer(self, caller: str, token_id: int, sender: str, recipient: str) -> bool:
        """
        Reassign token_id from sender to recipient.

        Preconditions are checked in this order:
          1. caller is the recipient (NotOwner otherwise)
          2. the token is not burned (BurnedToken)
          3. sender is the current owner (NotOwner); an unminted id has none
        """
        if caller != recipient:
            raise NotOwner(
                f"Only the recipient may claim token {token_id}", token_id=token_id
            )
        if self._repos.burns.is_burned(token_id):
            raise BurnedToken(f"Token {token_id} is retired", token_id=token_id)

        holder = self._repos.ownership.get_holder(token_id)
        if holder is None or holder != sender:
            raise NotOwner(
                f"'{sender}' does not own token {token_id}", token_id=token_id
            )

        self._repos.ownership.set_holder(token_id, recipient)
        self._repos.events.append(
            TokenTransferredEvent(
                token_id=token_id, actor=caller, sender=sender, recipient=recipient
            )
        )
        logger.info(f"Token {token_id} transferred from {sender} to {recipient}")
        return True
