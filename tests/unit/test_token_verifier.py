"""Unit tests for JWTTokenVerifier."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from reply_stream.core.auth.token_verifier import JWTTokenVerifier
from reply_stream.exceptions import AuthenticationError

SECRET = "unit-test-secret-0123456789"


def make_token(secret=SECRET, expires_in=300, **claims):
    payload = {"sub": "user-42", "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in)}
    payload.update(claims)
    return jwt.encode(payload, secret, algorithm="HS256")


class TestJWTTokenVerifier:

    @pytest.mark.asyncio
    async def test_valid_token(self):
        identity = await JWTTokenVerifier(SECRET).verify(make_token(email="a@b.c"))

        assert identity.user_id == "user-42"
        assert identity.email == "a@b.c"

    @pytest.mark.asyncio
    async def test_wrong_secret(self):
        with pytest.raises(AuthenticationError) as exc_info:
            await JWTTokenVerifier(SECRET).verify(make_token(secret="another-secret-9876543210"))
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_expired_token(self):
        with pytest.raises(AuthenticationError, match="expired"):
            await JWTTokenVerifier(SECRET).verify(make_token(expires_in=-10))

    @pytest.mark.asyncio
    async def test_missing_subject(self):
        token = jwt.encode(
            {"exp": datetime.now(timezone.utc) + timedelta(minutes=5)}, SECRET, algorithm="HS256"
        )
        with pytest.raises(AuthenticationError):
            await JWTTokenVerifier(SECRET).verify(token)

    @pytest.mark.asyncio
    async def test_audience_checked_when_configured(self):
        verifier = JWTTokenVerifier(SECRET, audience="authenticated")

        identity = await verifier.verify(make_token(aud="authenticated"))
        assert identity.user_id == "user-42"

        with pytest.raises(AuthenticationError):
            await verifier.verify(make_token(aud="anon"))

    @pytest.mark.asyncio
    async def test_garbage(self):
        with pytest.raises(AuthenticationError):
            await JWTTokenVerifier(SECRET).verify("not-a-jwt")
