"""Token lifecycle API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Path, status

from ..auth.dependencies import get_current_principal
from ..core.ledger import CarbonLedger
from ..repositories.dependencies import get_ledger
from .schemas import (
    BatchMintRequest,
    BatchMintResponse,
    BurnStatusResponse,
    MintRequest,
    MintResponse,
    OperationResponse,
    OwnerResponse,
    ProblemDetails,
    TokenResponse,
    TransferRequest,
    UriResponse,
    UriUpdateRequest,
)

router = APIRouter(prefix="/v1/tokens", tags=["tokens"])


@router.post(
    "",
    response_model=MintResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        201: {"description": "Token minted"},
        401: {"model": ProblemDetails, "description": "Authentication required"},
        403: {"model": ProblemDetails, "description": "Caller may not mint"},
        422: {"model": ProblemDetails, "description": "Invalid URI"},
    },
)
def mint_token(
    request: MintRequest,
    principal: str = Depends(get_current_principal),
    ledger: CarbonLedger = Depends(get_ledger),
) -> MintResponse:
    """
    Mint one token owned by the caller.

    Only the administrative identity may mint.
    """
    token_id = ledger.mint_one(principal, request.uri)
    return MintResponse(token_id=token_id)


@router.post(
    ":batch",
    response_model=BatchMintResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        201: {"description": "Batch processed; invalid items were skipped"},
        401: {"model": ProblemDetails, "description": "Authentication required"},
        403: {"model": ProblemDetails, "description": "Caller may not mint"},
        413: {"model": ProblemDetails, "description": "Request too large"},
        422: {"model": ProblemDetails, "description": "Empty or oversized batch"},
    },
)
def mint_batch(
    request: BatchMintRequest,
    principal: str = Depends(get_current_principal),
    ledger: CarbonLedger = Depends(get_ledger),
) -> BatchMintResponse:
    """
    Mint one token per URI.

    Items with an invalid URI are dropped; ``token_ids`` lists the ids that
    were minted, in input order, and may be shorter than ``uris``.
    """
    token_ids = ledger.mint_batch(principal, request.uris)
    return BatchMintResponse(token_ids=token_ids, requested=len(request.uris))


@router.get(
    "/{token_id}",
    response_model=TokenResponse,
    responses={404: {"model": ProblemDetails, "description": "Token not found"}},
)
def get_token(
    token_id: int = Path(..., ge=1, description="Token identifier"),
    ledger: CarbonLedger = Depends(get_ledger),
) -> TokenResponse:
    record = ledger.get_token(token_id)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Token {token_id} does not exist",
        )
    return TokenResponse.model_validate(record)


@router.get("/{token_id}/owner", response_model=OwnerResponse)
def get_owner(
    token_id: int = Path(..., ge=1, description="Token identifier"),
    ledger: CarbonLedger = Depends(get_ledger),
) -> OwnerResponse:
    """Current owner; null for unminted and burned tokens."""
    return OwnerResponse(token_id=token_id, owner=ledger.get_owner(token_id))


@router.get("/{token_id}/uri", response_model=UriResponse)
def get_uri(
    token_id: int = Path(..., ge=1, description="Token identifier"),
    ledger: CarbonLedger = Depends(get_ledger),
) -> UriResponse:
    return UriResponse(token_id=token_id, uri=ledger.get_uri(token_id))


@router.get("/{token_id}/burned", response_model=BurnStatusResponse)
def get_burned(
    token_id: int = Path(..., ge=1, description="Token identifier"),
    ledger: CarbonLedger = Depends(get_ledger),
) -> BurnStatusResponse:
    return BurnStatusResponse(id=token_id, burned=ledger.is_burned(token_id))


@router.post(
    "/{token_id}/transfer",
    response_model=OperationResponse,
    responses={
        401: {"model": ProblemDetails, "description": "Authentication required"},
        403: {"model": ProblemDetails, "description": "Caller is not the recipient or sender is not the owner"},
        409: {"model": ProblemDetails, "description": "Token is burned"},
    },
)
def transfer_token(
    request: TransferRequest,
    token_id: int = Path(..., ge=1, description="Token identifier"),
    principal: str = Depends(get_current_principal),
    ledger: CarbonLedger = Depends(get_ledger),
) -> OperationResponse:
    """
    Claim a token from its current owner.

    The authenticated caller must be the recipient.
    """
    ledger.transfer(principal, token_id, request.sender, request.recipient)
    return OperationResponse(token_id=token_id)


@router.post(
    "/{token_id}/burn",
    response_model=OperationResponse,
    responses={
        401: {"model": ProblemDetails, "description": "Authentication required"},
        403: {"model": ProblemDetails, "description": "Caller does not own the token"},
        404: {"model": ProblemDetails, "description": "Token not found"},
        409: {"model": ProblemDetails, "description": "Token already burned"},
    },
)
def burn_token(
    token_id: int = Path(..., ge=1, description="Token identifier"),
    principal: str = Depends(get_current_principal),
    ledger: CarbonLedger = Depends(get_ledger),
) -> OperationResponse:
    """Permanently retire a token. There is no way to undo this."""
    ledger.burn(principal, token_id)
    return OperationResponse(token_id=token_id)


@router.put(
    "/{token_id}/uri",
    response_model=OperationResponse,
    responses={
        401: {"model": ProblemDetails, "description": "Authentication required"},
        403: {"model": ProblemDetails, "description": "Caller does not own the token"},
        404: {"model": ProblemDetails, "description": "Token not found"},
        422: {"model": ProblemDetails, "description": "Invalid URI"},
    },
)
def update_uri(
    request: UriUpdateRequest,
    token_id: int = Path(..., ge=1, description="Token identifier"),
    principal: str = Depends(get_current_principal),
    ledger: CarbonLedger = Depends(get_ledger),
) -> OperationResponse:
    ledger.update_uri(principal, token_id, request.uri)
    return OperationResponse(token_id=token_id)
