"""Enums for the carbon ledger."""

from enum import Enum


class LedgerErrorCode(str, Enum):
    """Stable error codes returned to ledger callers."""

    NOT_AUTHORIZED = "not_authorized"
    NOT_OWNER = "not_owner"
    TOKEN_NOT_FOUND = "token_not_found"
    INVALID_URI = "invalid_uri"
    INVALID_BATCH_SIZE = "invalid_batch_size"
    INVALID_PAGE_REQUEST = "invalid_page_request"
    BURNED_TOKEN = "burned_token"
    BURN_FAILED = "burn_failed"


class LedgerEventType(str, Enum):
    """Kinds of entries in the ledger event log."""

    TOKEN_MINTED = "token_minted"
    TOKEN_TRANSFERRED = "token_transferred"
    TOKEN_BURNED = "token_burned"
    TOKEN_URI_UPDATED = "token_uri_updated"
