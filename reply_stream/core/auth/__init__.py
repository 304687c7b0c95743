from reply_stream.core.auth.token_verifier import (
    TokenVerifier, JWTTokenVerifier, VerifiedIdentity
)

__all__ = ["TokenVerifier", "JWTTokenVerifier", "VerifiedIdentity"]
