"""JWT access tokens carrying the caller's principal."""

import jwt
from datetime import datetime, timezone, timedelta
from typing import Dict, Any, Optional, Tuple
from uuid import uuid4

from fastapi import HTTPException, status

from ..config import get_config
from ..core.validation import MAX_PRINCIPAL_LENGTH


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


class JWTTokenManager:
    """Issues and verifies HS256 access tokens whose ``sub`` is the principal."""

    def __init__(self, secret_key: Optional[str] = None, expires_minutes: Optional[int] = None):
        config = get_config()
        self.secret_key = secret_key or config.app.jwt_secret_key
        self.algorithm = "HS256"
        self.access_token_expires_minutes = (
            expires_minutes or config.app.jwt_access_token_expires_minutes
        )

    def create_access_token(
        self,
        principal: str,
        expires_minutes: Optional[int] = None,
        additional_claims: Optional[Dict[str, Any]] = None,
    ) -> Tuple[str, datetime]:
        """
        Create an access token for a principal.

        Args:
            principal: Identity the ledger will see as the caller
            expires_minutes: Lifetime override, defaults to the configured value
            additional_claims: Optional additional claims to include

        Returns:
            Tuple of (access_token, expires_at)
        """
        if not principal:
            raise ValueError("principal must not be empty")
        if len(principal) > MAX_PRINCIPAL_LENGTH:
            raise ValueError(
                f"principal must be at most {MAX_PRINCIPAL_LENGTH} characters"
            )

        now = datetime.now(timezone.utc)
        expires_at = now + timedelta(
            minutes=expires_minutes or self.access_token_expires_minutes
        )
        payload = {
            "sub": principal,
            "iat": now,
            "exp": expires_at,
            "jti": str(uuid4()),
            "type": "access",
        }
        if additional_claims:
            payload.update(additional_claims)

        token = jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
        return token, expires_at

    def verify_access_token(self, token: str) -> Dict[str, Any]:
        """
        Verify and decode access token.

        Raises:
            HTTPException: If token is invalid, expired, or wrong type
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            raise _unauthorized("Access token has expired")
        except jwt.InvalidTokenError:
            raise _unauthorized("Invalid access token")

        if payload.get("type") != "access":
            raise _unauthorized("Invalid token type")
        subject = payload.get("sub")
        if not subject or not isinstance(subject, str):
            raise _unauthorized("Access token has no subject")
        if len(subject) > MAX_PRINCIPAL_LENGTH:
            raise _unauthorized("Access token subject is too long")
        return payload

    def extract_principal(self, token: str) -> str:
        return self.verify_access_token(token)["sub"]


# Global instance
jwt_manager = JWTTokenManager()
