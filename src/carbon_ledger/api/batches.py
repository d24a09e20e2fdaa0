"""Read-only batch metadata API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Path, status

from ..core.ledger import CarbonLedger
from ..repositories.dependencies import get_ledger
from .schemas import BatchMetadataResponse, ProblemDetails

router = APIRouter(prefix="/v1/batches", tags=["batches"])


@router.get(
    "/{batch_id}",
    response_model=BatchMetadataResponse,
    responses={404: {"model": ProblemDetails, "description": "No description stored for batch"}},
)
def get_batch_metadata(
    batch_id: int = Path(..., description="Batch identifier"),
    ledger: CarbonLedger = Depends(get_ledger),
) -> BatchMetadataResponse:
    """
    Look up the description of a batch.

    Descriptions are seeded directly in storage; the API never writes them.
    """
    description = ledger.get_batch_metadata(batch_id)
    if description is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No metadata stored for batch {batch_id}",
        )
    return BatchMetadataResponse(batch_id=batch_id, description=description)
