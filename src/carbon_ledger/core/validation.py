"""Input rules shared by the minting, metadata and enumeration paths."""

from typing import Any, Optional, Sequence

from ..domain.errors import InvalidBatchSize, InvalidPageRequest, InvalidUri

MIN_URI_LENGTH = 1
MAX_URI_LENGTH = 256
MAX_BATCH_SIZE = 50
MAX_PRINCIPAL_LENGTH = 128


def is_valid_uri(uri: Any) -> bool:
    """True iff uri is an ASCII string of 1 to 256 characters."""
    return (
        isinstance(uri, str)
        and uri.isascii()
        and MIN_URI_LENGTH <= len(uri) <= MAX_URI_LENGTH
    )


def require_valid_uri(uri: Any, token_id: Optional[int] = None) -> str:
    if not is_valid_uri(uri):
        length = len(uri) if isinstance(uri, str) else None
        raise InvalidUri(
            f"URI must be ASCII with length {MIN_URI_LENGTH}..{MAX_URI_LENGTH} (got length {length})",
            token_id=token_id,
        )
    return uri


def require_batch_size(uris: Any) -> None:
    # A bare string is a Sequence of characters, not a batch
    if isinstance(uris, (str, bytes)) or not isinstance(uris, Sequence):
        raise InvalidBatchSize(
            f"Batch must be a list of URIs (got {type(uris).__name__})"
        )
    if not 0 < len(uris) <= MAX_BATCH_SIZE:
        raise InvalidBatchSize(
            f"Batch must contain 1..{MAX_BATCH_SIZE} URIs (got {len(uris)})"
        )


def require_page_window(start: int, count: int, max_page_size: int) -> None:
    if start < 1:
        raise InvalidPageRequest(f"start must be >= 1 (got {start})")
    if not 0 <= count <= max_page_size:
        raise InvalidPageRequest(
            f"count must be between 0 and {max_page_size} (got {count})"
        )
