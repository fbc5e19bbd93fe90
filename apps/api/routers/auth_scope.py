"""Authentication dependencies for API user scoping."""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from models.common import is_object_id
from models.user import User
from services.credentials import verify_access
from services.errors import BadRequest, Forbidden, Unauthenticated


ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"

auth_scheme = HTTPBearer(auto_error=False)


@dataclass
class AuthContext:
    user_id: str
    user: User
    email: Optional[str] = None


def ensure_owner(auth: AuthContext, owner_id: str) -> None:
    """Reject mutations of entities owned by another user."""
    if owner_id != auth.user_id:
        raise Forbidden()


def ensure_object_id(value: str, label: str) -> str:
    if not is_object_id(value):
        raise BadRequest(f"Invalid {label} id")
    return value


async def get_auth_context(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(auth_scheme),
    db: AsyncSession = Depends(get_db),
) -> AuthContext:
    """Resolve the authenticated user from the access cookie or a Bearer token."""
    bearer = None
    if credentials and credentials.scheme.lower() == "bearer":
        bearer = credentials.credentials
    cookie = request.cookies.get(ACCESS_COOKIE)

    if cookie:
        try:
            user = await verify_access(db, cookie)
        except Unauthenticated:
            # A stale cookie must not shadow a valid header.
            if not bearer:
                raise
            user = await verify_access(db, bearer)
    else:
        user = await verify_access(db, bearer)
    return AuthContext(user_id=user.id, user=user, email=user.email)
