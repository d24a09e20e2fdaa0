"""Pydantic models for API request/response validation."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ConfigDict  # type: ignore

from ..core.validation import MAX_BATCH_SIZE, MAX_PRINCIPAL_LENGTH


# Base response models
class BaseResponse(BaseModel):
    """Base response model with common fields."""

    model_config = ConfigDict(from_attributes=True)


class ProblemDetails(BaseModel):
    """RFC 9457 Problem Details for HTTP APIs."""

    type: str = Field(description="A URI reference that identifies the problem type")
    title: str = Field(
        description="A short, human-readable summary of the problem type"
    )
    status: int = Field(description="The HTTP status code")
    detail: Optional[str] = Field(
        None, description="A human-readable explanation specific to this occurrence"
    )
    instance: Optional[str] = Field(
        None, description="A URI reference that identifies the specific occurrence"
    )
    code: Optional[str] = Field(None, description="Ledger error code, when applicable")
    token_id: Optional[int] = Field(None, description="Token the error refers to")


# Minting schemas
# URI rules are enforced by the ledger itself so a bad URI surfaces as the
# ledger's invalid_uri error, and a bad batch item is dropped rather than
# failing the whole request.
class MintRequest(BaseModel):
    """Schema for minting a single token."""

    uri: str = Field(description="Opaque ASCII metadata URI")


class MintResponse(BaseModel):
    """Schema for a single mint result."""

    token_id: int = Field(description="Identifier of the new token", ge=1)


class BatchMintRequest(BaseModel):
    """Schema for batch minting."""

    # Items are checked one by one when minting; a bad item is skipped, not rejected
    uris: List[Any] = Field(
        description=f"Metadata URIs, one per token, at most {MAX_BATCH_SIZE}"
    )


class BatchMintResponse(BaseModel):
    """Schema for batch mint results."""

    token_ids: List[int] = Field(
        description="Ids of the items that minted, in input order"
    )
    requested: int = Field(description="Number of URIs submitted")


# Lifecycle schemas
class TransferRequest(BaseModel):
    """Schema for a recipient claiming a token from its owner."""

    sender: str = Field(description="Current owner", min_length=1, max_length=MAX_PRINCIPAL_LENGTH)
    recipient: str = Field(description="Claiming principal", min_length=1, max_length=MAX_PRINCIPAL_LENGTH)


class UriUpdateRequest(BaseModel):
    """Schema for replacing a token's metadata URI."""

    uri: str = Field(description="New ASCII metadata URI")


class OperationResponse(BaseModel):
    """Schema for mutations that only report success."""

    success: bool = True
    token_id: int


# Read schemas
class TokenResponse(BaseResponse):
    """Schema for one token's aggregate record."""

    id: int
    uri: str
    owner: Optional[str] = Field(None, description="None once the token is burned")
    burned: bool


class OwnerResponse(BaseModel):
    token_id: int
    owner: Optional[str] = None


class UriResponse(BaseModel):
    token_id: int
    uri: Optional[str] = None


class BurnStatusResponse(BaseResponse):
    """Schema for a token's retirement flag."""

    id: int
    burned: bool


class LedgerStatsResponse(BaseModel):
    """Schema for ledger counters."""

    last_id: int
    total_minted: int


class TokenListResponse(BaseModel):
    """Schema for a page of tokens."""

    start: int
    count: int
    tokens: List[TokenResponse]


class BurnStatusListResponse(BaseModel):
    statuses: List[BurnStatusResponse]
    total: int


class EventResponse(BaseModel):
    """Schema for one stored ledger event."""

    seq: int = Field(description="Sequence number in the event log")
    type: str = Field(description="Event type")
    token_id: int
    actor: str
    timestamp: datetime
    payload: Dict[str, Any]


class EventListResponse(BaseModel):
    """Schema for event list response."""

    events: List[EventResponse]
    total: int
    next_since_seq: Optional[int] = Field(
        None, description="Pass as since_seq to fetch the next page"
    )


class BatchMetadataResponse(BaseModel):
    batch_id: int
    description: str
