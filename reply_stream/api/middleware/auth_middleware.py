"""
Authentication Middleware
Bearer token authentication for the Reply Stream API.
"""

from typing import Optional

from fastapi import Depends, Header
from pydantic import BaseModel
import structlog

from reply_stream.config.constants import ERROR_MESSAGES
from reply_stream.core.auth.token_verifier import VerifiedIdentity
from reply_stream.dependencies import get_container
from reply_stream.exceptions import AuthenticationError
from reply_stream.services.service_container import ServiceContainer
from reply_stream.utils.logger import bind_context

logger = structlog.get_logger()


class AuthContext(BaseModel):
    """Authentication context for requests"""
    user_id: str
    email: Optional[str] = None
    role: Optional[str] = None
    token_type: str = "bearer"

    @classmethod
    def from_identity(cls, identity: VerifiedIdentity) -> "AuthContext":
        return cls(user_id=identity.user_id, email=identity.email, role=identity.role)


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_auth_context(
        authorization: Optional[str] = Header(default=None, alias="Authorization"),
        container: ServiceContainer = Depends(get_container)
) -> AuthContext:
    """
    Extract and validate authentication context from request

    Raises:
        AuthenticationError: If the header is missing or the token is invalid
    """
    token = extract_bearer_token(authorization)
    if token is None:
        logger.warning("Missing bearer token")
        raise AuthenticationError(
            "No bearer token provided",
            user_message=ERROR_MESSAGES["MISSING_TOKEN"]
        )

    identity = await container.token_verifier.verify(token)
    bind_context(user_id=identity.user_id)
    return AuthContext.from_identity(identity)
