"""Ledger event contracts.

Every successful mutation of the ledger appends one of these events to the
event log inside the same unit of work. Events are immutable and append-only.
"""

from datetime import datetime, timezone
from typing import ClassVar, Dict, Type, Any
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, ConfigDict, SerializeAsAny  # type: ignore

from ..core.enums import LedgerEventType


class BaseLedgerEvent(BaseModel):
    """Base class for all ledger events."""

    model_config = ConfigDict(
        frozen=True,  # Events are immutable
        extra="forbid",
    )

    event_type: ClassVar[LedgerEventType]

    event_id: UUID = Field(default_factory=uuid4)
    token_id: int = Field(ge=1)
    actor: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class TokenMintedEvent(BaseLedgerEvent):
    """A new token was issued to the administrative identity."""

    event_type: ClassVar[LedgerEventType] = LedgerEventType.TOKEN_MINTED

    owner: str
    uri: str


class TokenTransferredEvent(BaseLedgerEvent):
    """Custody of a token moved to the claiming recipient."""

    event_type: ClassVar[LedgerEventType] = LedgerEventType.TOKEN_TRANSFERRED

    sender: str
    recipient: str


class TokenBurnedEvent(BaseLedgerEvent):
    """A token was permanently retired by its holder."""

    event_type: ClassVar[LedgerEventType] = LedgerEventType.TOKEN_BURNED

    owner: str


class TokenUriUpdatedEvent(BaseLedgerEvent):
    """The holder replaced a token's metadata URI."""

    event_type: ClassVar[LedgerEventType] = LedgerEventType.TOKEN_URI_UPDATED

    uri: str


EVENT_CLASSES: Dict[str, Type[BaseLedgerEvent]] = {
    cls.event_type.value: cls
    for cls in (
        TokenMintedEvent,
        TokenTransferredEvent,
        TokenBurnedEvent,
        TokenUriUpdatedEvent,
    )
}


def deserialize_event(event_type: str, payload: Dict[str, Any]) -> BaseLedgerEvent:
    """Rebuild a stored event from its type tag and JSON payload.

    Raises:
        ValueError: If the event type is unknown or the payload is invalid
    """
    event_class = EVENT_CLASSES.get(event_type)
    if event_class is None:
        raise ValueError(f"Unknown event type: {event_type}")
    return event_class.model_validate(payload)


class EventEnvelope(BaseModel):
    """Stored event with its position in the log."""

    model_config = ConfigDict(frozen=True)

    sequence_number: int = Field(ge=1)
    stored_at: datetime
    event: SerializeAsAny[BaseLedgerEvent]

    @property
    def event_type(self) -> str:
        return self.event.event_type.value
