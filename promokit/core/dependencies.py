"""
Common dependencies for FastAPI routes.
"""

from typing import Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from promokit.core.config import get_settings

# HTTP Bearer token security scheme
security = HTTPBearer()


def decode_token(token: str) -> Optional[dict]:
    """Decode and validate a JWT issued by the identity provider."""
    settings = get_settings()
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


async def get_current_account(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> dict:
    """
    Dependency resolving the caller's user and account from the bearer token.
    Returns a dict with 'id' (user) and 'account_id'.
    """
    payload = decode_token(credentials.credentials)

    if not payload or not payload.get("sub") or not payload.get("account_id"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return {
        "id": str(payload["sub"]),
        "account_id": str(payload["account_id"]),
    }
