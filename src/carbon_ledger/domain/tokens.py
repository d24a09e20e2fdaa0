"""Read models assembled from the ownership, metadata and burn stores."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field  # type: ignore


class TokenRecord(BaseModel):
    """Aggregate view of one token."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(ge=1)
    uri: str
    # None once the token is burned: a retired token has no resolvable owner
    owner: Optional[str] = None
    burned: bool = False


class BurnStatus(BaseModel):
    """Retirement flag for one token id."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(ge=1)
    burned: bool
