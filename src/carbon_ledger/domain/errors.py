"""Ledger error taxonomy.

Every failed precondition of a ledger operation raises one of these. The
operation that raised leaves no state change behind.
"""

from typing import Optional

from ..core.enums import LedgerErrorCode


class LedgerError(Exception):
    """Base exception for ledger operations."""

    code: LedgerErrorCode

    def __init__(self, message: str, token_id: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.token_id = token_id


class NotAuthorized(LedgerError):
    """Caller lacks the administrative role."""

    code = LedgerErrorCode.NOT_AUTHORIZED


class NotOwner(LedgerError):
    """Caller is not the current or claimed owner."""

    code = LedgerErrorCode.NOT_OWNER


class TokenNotFound(LedgerError):
    """Token id has never been minted."""

    code = LedgerErrorCode.TOKEN_NOT_FOUND


class InvalidUri(LedgerError):
    """Metadata URI is not ASCII or its length is outside [1, 256]."""

    code = LedgerErrorCode.INVALID_URI


class InvalidBatchSize(LedgerError):
    """Batch mint with no items or more than the batch ceiling."""

    code = LedgerErrorCode.INVALID_BATCH_SIZE


class InvalidPageRequest(LedgerError):
    """Enumeration window outside the allowed bounds."""

    code = LedgerErrorCode.INVALID_PAGE_REQUEST


class BurnedToken(LedgerError):
    """Transfer attempted on a retired token."""

    code = LedgerErrorCode.BURNED_TOKEN


class BurnFailed(LedgerError):
    """Burn attempted on a token that is already retired."""

    code = LedgerErrorCode.BURN_FAILED


class RepositoryError(Exception):
    """Raised when the storage layer fails underneath a ledger operation."""
