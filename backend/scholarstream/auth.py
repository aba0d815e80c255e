"""
Scholar Stream Backend: Authentication & Role Guards
=====================================================

What:  FastAPI dependencies that verify the bearer token and enforce roles.
How:   `get_current_user` decodes `Authorization: Bearer <token>` with PyJWT
       and attaches the claims to `request.state.user`. `require_role()`
       builds a dependency that compares the attached role to a fixed value.
Who:   Declared on routes with `Depends(...)`.

Failure mapping:
    no header / empty header → AuthenticationError (401 "No token provided")
    malformed header         → InvalidTokenError   (403 "Invalid token")
    bad signature / expired  → InvalidTokenError   (403 "Invalid token")
    wrong role               → ForbiddenError      (403 role-specific message)

No guard exists for the "student" role.
"""

import enum
import logging
from typing import Any, Dict, Optional

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from scholarstream.config import settings
from scholarstream.exceptions import AuthenticationError, ForbiddenError, InvalidTokenError

logger = logging.getLogger(__name__)

ROLE_STUDENT = "student"
ROLE_MODERATOR = "moderator"
ROLE_ADMIN = "admin"

# auto_error=False: a missing header must be a 401 with our own body
bearer_scheme = HTTPBearer(auto_error=False)


class AccessScope(str, enum.Enum):
    """
    Authorization scope of an operation over applications.

    ANY:   operate on every matching document (current behaviour of all routes)
    SELF:  restrict to documents whose `userEmail` is the caller's email
    """

    SELF = "self"
    ANY = "any"


def decode_token(token: str) -> Dict[str, Any]:
    """
    Verify a JWT and return its claims.

    Raises:
        InvalidTokenError: signature, expiry or format check failed
    """
    if not settings.jwt_secret:
        logger.error("JWT_SECRET is not configured; rejecting token")
        raise InvalidTokenError()
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError as e:
        logger.info("Token rejected: %s", str(e))
        raise InvalidTokenError(context={"reason": type(e).__name__})


def token_from_header(authorization: str) -> str:
    """Second space-separated part of the header ("Bearer abc" → "abc"), or ""."""
    parts = authorization.split()
    return parts[1] if len(parts) > 1 else ""


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Dict[str, Any]:
    """
    Authenticate the request and return the decoded token claims.

    Only a missing (or empty) Authorization header is a 401. A header that
    is present but malformed ("Token abc", a bare "Bearer") still goes
    through `decode_token` and fails as an invalid token (403).

    The claims (including `role` and usually `email`) are also stored on
    `request.state.user` for middleware and handlers that read the request.
    """
    authorization = request.headers.get("Authorization")
    if not authorization:
        raise AuthenticationError()

    if credentials is not None:
        token = credentials.credentials
    else:
        token = token_from_header(authorization)

    claims = decode_token(token)
    request.state.user = claims
    return claims


def require_role(role: str, message: str):
    """
    Build a dependency that admits only callers whose token role equals `role`.

    Usage:
        @router.delete("/users/{id}", dependencies=[Depends(require_admin)])
    """

    async def role_guard(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
        if user.get("role") != role:
            raise ForbiddenError(message=message, required_role=role)
        return user

    role_guard.__name__ = f"require_{role}"
    return role_guard


require_admin = require_role(ROLE_ADMIN, "Forbidden: Admins only")
require_moderator = require_role(ROLE_MODERATOR, "Forbidden: Moderators only")
