"""Authentication dependencies for FastAPI routes.

Routes do not reject anonymous requests themselves: the caller id is passed
to the services, which answer with an UNAUTHORIZED result when it is None.
"""

from typing import Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tender_filing.core.jwt import jwt_verifier
from tender_filing.utils.logging import get_logger

LOGGER = get_logger(__name__)

# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)


async def get_caller_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[str]:
    """Return the authenticated user's id, or None for a missing or invalid token.

    Args:
        credentials: HTTP Authorization credentials (automatically injected)
    """
    if not credentials:
        LOGGER.debug("No authorization credentials provided")
        return None

    try:
        claims = jwt_verifier.verify_token(credentials.credentials)
    except jwt.InvalidTokenError as e:
        LOGGER.warning(f"Invalid token: {e}")
        return None

    return claims.sub
