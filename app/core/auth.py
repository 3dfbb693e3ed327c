"""Authentication dependencies for FastAPI routes.

Identity comes from a bearer token issued elsewhere. The token is verified
with the shared secret and the configured claim is taken as the user id; the
engine never derives identity on its own.
"""

from typing import Any, Dict, Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.config import settings
from app.schemas.actions import CurrentUser
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)

# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)


def decode_token(token: str) -> Dict[str, Any]:
    """Verify ``token`` and return its claims.

    Raises:
        jwt.InvalidTokenError: If the token is invalid, expired or lacks the
            user id claim
    """
    if not settings.auth.jwt_secret:
        raise jwt.InvalidTokenError("JWT_SECRET is not configured")

    return jwt.decode(
        token,
        settings.auth.jwt_secret,
        algorithms=[settings.auth.jwt_algorithm],
        options={"require": [settings.auth.user_id_claim], "verify_aud": False},
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> CurrentUser:
    """Get the current authenticated user from the bearer token.

    Raises:
        HTTPException: If the token is missing, invalid or expired
    """
    if not credentials:
        LOGGER.warning("No authorization credentials provided")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header missing",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        claims = decode_token(credentials.credentials)
    except jwt.ExpiredSignatureError as e:
        LOGGER.warning(f"Token expired: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e
    except jwt.InvalidTokenError as e:
        LOGGER.warning(f"Invalid token: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    user = CurrentUser(user_id=claims[settings.auth.user_id_claim], claims=claims)
    LOGGER.debug(f"Authenticated user: {user.user_id}")
    return user
