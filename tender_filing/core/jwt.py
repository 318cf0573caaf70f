"""JWT verification for Supabase access tokens.

Tokens are signed with the project's shared secret (HS256).
"""

from typing import Any, Dict, Optional

import jwt
from pydantic import BaseModel

from tender_filing.core.config import settings
from tender_filing.utils.logging import get_logger

LOGGER = get_logger(__name__)


class JWTClaims(BaseModel):
    """Decoded JWT claims from Supabase."""

    sub: str  # User ID
    email: Optional[str] = None
    role: str = "authenticated"
    exp: int
    iat: Optional[int] = None
    aud: str = ""

    app_metadata: Optional[Dict[str, Any]] = None
    user_metadata: Optional[Dict[str, Any]] = None


class JWTVerifier:
    """Verifies Supabase access tokens against the shared secret."""

    def __init__(self, jwt_secret: str, audience: str = "authenticated"):
        self.jwt_secret = jwt_secret
        self.audience = audience

    def verify_token(self, token: str) -> JWTClaims:
        """Verify and decode a token.

        Args:
            token: JWT access token from the Authorization header

        Returns:
            Decoded and validated JWT claims

        Raises:
            jwt.InvalidTokenError: If the token is invalid, expired or the
                secret is not configured
        """
        if not self.jwt_secret:
            raise jwt.InvalidTokenError("SUPABASE_JWT_SECRET is not configured")

        try:
            payload = jwt.decode(
                token,
                self.jwt_secret,
                algorithms=["HS256"],
                audience=self.audience,
                options={"verify_exp": True, "require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError as e:
            LOGGER.warning(f"Token expired: {e}")
            raise jwt.InvalidTokenError("Token has expired") from e
        except jwt.InvalidSignatureError as e:
            LOGGER.warning(f"Invalid signature: {e}")
            raise jwt.InvalidTokenError("Invalid token signature") from e

        claims = JWTClaims(**payload)
        LOGGER.debug(f"Successfully verified token for user: {claims.sub}")
        return claims


jwt_verifier = JWTVerifier(
    jwt_secret=settings.supabase_jwt_secret,
    audience=settings.supabase.jwt_audience,
)
