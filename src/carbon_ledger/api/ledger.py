"""Ledger-wide read API endpoints: counters, enumeration and the event log."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..core.ledger import CarbonLedger
from ..repositories.dependencies import get_ledger
from .schemas import (
    BurnStatusListResponse,
    BurnStatusResponse,
    EventListResponse,
    EventResponse,
    LedgerStatsResponse,
    ProblemDetails,
    TokenListResponse,
    TokenResponse,
)

router = APIRouter(prefix="/v1/ledger", tags=["ledger"])


@router.get("/stats", response_model=LedgerStatsResponse)
def get_stats(ledger: CarbonLedger = Depends(get_ledger)) -> LedgerStatsResponse:
    last_id = ledger.get_last_id()
    return LedgerStatsResponse(last_id=last_id, total_minted=last_id)


@router.get(
    "/tokens",
    response_model=TokenListResponse,
    responses={
        404: {"model": ProblemDetails, "description": "Window contains an unminted id"},
        422: {"model": ProblemDetails, "description": "Invalid page window"},
    },
)
def list_tokens(
    start: int = Query(1, description="First token id of the window"),
    count: int = Query(20, description="Number of consecutive ids"),
    ledger: CarbonLedger = Depends(get_ledger),
) -> TokenListResponse:
    """
    List a window of consecutive token ids.

    Bounds are checked by the ledger so that out-of-range windows report the
    ledger's invalid_page_request code.
    """
    records = ledger.list_range(start, count)
    return TokenListResponse(
        start=start,
        count=count,
        tokens=[TokenResponse.model_validate(r) for r in records],
    )


@router.get(
    "/burn-statuses",
    response_model=BurnStatusListResponse,
    responses={404: {"model": ProblemDetails, "description": "Unminted id below the high-water mark"}},
)
def list_burn_statuses(
    ledger: CarbonLedger = Depends(get_ledger),
) -> BurnStatusListResponse:
    statuses = ledger.all_burn_statuses()
    return BurnStatusListResponse(
        statuses=[BurnStatusResponse.model_validate(s) for s in statuses],
        total=len(statuses),
    )


@router.get("/events", response_model=EventListResponse)
def list_events(
    since_seq: int = Query(0, ge=0, description="Return events after this sequence number"),
    limit: int = Query(100, ge=1, le=1000, description="Maximum number of events"),
    token_id: Optional[int] = Query(None, ge=1, description="Only events for this token"),
    ledger: CarbonLedger = Depends(get_ledger),
) -> EventListResponse:
    """
    Read the append-only event log, oldest first.

    Use ``next_since_seq`` from the response to fetch the following page.
    """
    envelopes = ledger.get_events(since_seq=since_seq, limit=limit, token_id=token_id)

    events = []
    for envelope in envelopes:
        payload = envelope.event.model_dump(
            mode="json", exclude={"event_id", "token_id", "actor", "timestamp"}
        )
        events.append(
            EventResponse(
                seq=envelope.sequence_number,
                type=envelope.event_type,
                token_id=envelope.event.token_id,
                actor=envelope.event.actor,
                timestamp=envelope.event.timestamp,
                payload=payload,
            )
        )

    return EventListResponse(
        events=events,
        total=len(events),
        next_since_seq=events[-1].seq if events else None,
    )
