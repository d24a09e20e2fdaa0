"""Authentication dependencies for FastAPI."""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional

from .jwt_auth import jwt_manager
from ..utils.logging_config import get_logger

logger = get_logger('auth')

# auto_error is off so a missing header becomes 401 rather than 403
security = HTTPBearer(auto_error=False)


def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """
    Resolve the calling principal from the Bearer token.

    Route handlers pass the result to the ledger as ``caller``.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return jwt_manager.extract_principal(credentials.credentials)
    except HTTPException as e:
        logger.warning(f"Rejected bearer token: {e.detail}")
        raise
