"""
Scholar Stream Backend: Auth & Role Guard Tests
================================================

What:  Token decoding and the admin/moderator dependencies.
How:   Calls the dependencies directly with hand-built credentials; no HTTP.

What we test:
    ✅ Valid token returns its claims and sets request.state.user
    ✅ Missing/empty header → AuthenticationError, malformed header → InvalidTokenError
    ✅ Bad signature, expired, garbage, missing secret → InvalidTokenError
    ✅ Role guards admit exactly one role
"""

import time
from types import SimpleNamespace
from unittest.mock import patch

import jwt
import pytest
from fastapi.security import HTTPAuthorizationCredentials

from conftest import make_token
from scholarstream.auth import (
    decode_token,
    get_current_user,
    require_admin,
    require_moderator,
)
from scholarstream.config import settings
from scholarstream.exceptions import AuthenticationError, ForbiddenError, InvalidTokenError


def _request(authorization=None):
    headers = {"Authorization": authorization} if authorization is not None else {}
    return SimpleNamespace(state=SimpleNamespace(), headers=headers)


def _credentials(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class TestDecodeToken:

    def test_valid_token_returns_claims(self):
        claims = decode_token(make_token(role="admin", email="a@example.com"))
        assert claims["role"] == "admin"
        assert claims["email"] == "a@example.com"

    def test_wrong_secret_rejected(self):
        token = jwt.encode({"role": "admin"}, "some-other-secret-0123456789abcdefghij", algorithm="HS256")
        with pytest.raises(InvalidTokenError, match="Invalid token"):
            decode_token(token)

    def test_expired_token_rejected(self):
        token = make_token(role="student", exp=int(time.time()) - 60)
        with pytest.raises(InvalidTokenError):
            decode_token(token)

    def test_garbage_rejected(self):
        with pytest.raises(InvalidTokenError):
            decode_token("not.a.jwt")

    def test_missing_secret_rejects_everything(self):
        token = make_token(role="admin")
        with patch.object(settings, "jwt_secret", ""):
            with pytest.raises(InvalidTokenError):
                decode_token(token)


class TestGetCurrentUser:

    @pytest.mark.asyncio
    async def test_sets_request_state(self):
        token = make_token(email="s@example.com")
        request = _request(f"Bearer {token}")
        claims = await get_current_user(request, _credentials(token))
        assert claims["email"] == "s@example.com"
        assert request.state.user is claims

    @pytest.mark.asyncio
    async def test_no_credentials(self):
        with pytest.raises(AuthenticationError, match="No token provided"):
            await get_current_user(_request(), None)

    @pytest.mark.asyncio
    async def test_empty_header(self):
        with pytest.raises(AuthenticationError):
            await get_current_user(_request(""), None)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("header", ["Bearer", "Bearer   ", "Token abc.def.ghi", "abc.def.ghi"])
    async def test_malformed_header_is_invalid_token(self, header):
        with pytest.raises(InvalidTokenError):
            await get_current_user(_request(header), None)


class TestRoleGuards:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("role", ["student", "moderator", None])
    async def test_admin_guard_rejects_non_admins(self, role):
        with pytest.raises(ForbiddenError, match="Admins only"):
            await require_admin({"role": role})

    @pytest.mark.asyncio
    async def test_admin_guard_admits_admin(self):
        user = {"role": "admin", "email": "a@example.com"}
        assert await require_admin(user) is user

    @pytest.mark.asyncio
    @pytest.mark.parametrize("role", ["student", "admin"])
    async def test_moderator_guard_rejects_others(self, role):
        # An admin is not a moderator
        with pytest.raises(ForbiddenError, match="Moderators only"):
            await require_moderator({"role": role})

    @pytest.mark.asyncio
    async def test_moderator_guard_admits_moderator(self):
        user = {"role": "moderator"}
        assert await require_moderator(user) is user
