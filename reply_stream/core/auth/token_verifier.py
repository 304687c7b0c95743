"""
Bearer token verification.

The identity provider issues HS256 JWTs whose ``sub`` claim is the user id.
Verification is kept behind a small interface so the route never depends on
how tokens are checked.
"""

from abc import ABC, abstractmethod
from typing import Optional

import jwt
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError
from pydantic import BaseModel
import structlog

from reply_stream.exceptions import AuthenticationError
from reply_stream.models.types import UserId

logger = structlog.get_logger(__name__)


class VerifiedIdentity(BaseModel):
    """Identity extracted from a valid token"""
    user_id: UserId
    email: Optional[str] = None
    role: Optional[str] = None


class TokenVerifier(ABC):
    """Turns a bearer token into a user identity"""

    @abstractmethod
    async def verify(self, token: str) -> VerifiedIdentity:
        """
        Verify a bearer token.

        Raises:
            AuthenticationError: If the token is invalid or expired
        """


class JWTTokenVerifier(TokenVerifier):
    """Verifies tokens locally with the provider's shared JWT secret"""

    REQUIRED_CLAIMS = ["sub", "exp"]

    def __init__(self, secret: str, algorithm: str = "HS256", audience: Optional[str] = None):
        self.secret = secret
        self.algorithm = algorithm
        self.audience = audience

    async def verify(self, token: str) -> VerifiedIdentity:
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                audience=self.audience,
                options={
                    "require": self.REQUIRED_CLAIMS,
                    "verify_aud": self.audience is not None,
                }
            )
        except ExpiredSignatureError as e:
            logger.warning("Expired JWT token")
            raise AuthenticationError("Token has expired", caused_by=e)
        except InvalidTokenError as e:
            logger.warning("Invalid JWT token", error=str(e))
            raise AuthenticationError("Invalid token", caused_by=e)

        return VerifiedIdentity(
            user_id=str(payload["sub"]),
            email=payload.get("email"),
            role=payload.get("role"),
        )
