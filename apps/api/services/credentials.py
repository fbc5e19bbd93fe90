"""Credential verification and access/refresh session issuance."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from sqlalchemy import or_, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from models.user import User
from services.crypto import hash_password, verify_password
from services.errors import (
    BadRequest,
    InternalError,
    InvalidCredentials,
    InvalidToken,
    Unauthenticated,
    Unauthorized,
)
from services.session_token import (
    create_access_token,
    create_refresh_token,
    decode_access_token,
    decode_refresh_token,
)

logger = logging.getLogger(__name__)


@dataclass
class TokenPair:
    access_token: str
    refresh_token: str
    access_expires_at: int
    refresh_expires_at: int


def _mint_pair(user: User) -> TokenPair:
    access = create_access_token(user.id, user.email, user.user_name, user.full_name)
    refresh_token = create_refresh_token(user.id)
    return TokenPair(
        access_token=access["token"],
        refresh_token=refresh_token["token"],
        access_expires_at=access["expires_at"],
        refresh_expires_at=refresh_token["expires_at"],
    )


async def find_user_by_identifier(db: AsyncSession, *identifiers: Optional[str]) -> Optional[User]:
    """Match any identifier against email or the normalized username."""
    values = [value.strip() for value in identifiers if value and value.strip()]
    if not values:
        return None
    conditions = []
    for value in values:
        conditions.extend((User.email == value, User.user_name == value.lower()))
    result = await db.execute(select(User).where(or_(*conditions)).limit(1))
    return result.scalar_one_or_none()


async def issue_token_pair(db: AsyncSession, user: User) -> TokenPair:
    """Mint a new token pair and make its refresh token the only valid one."""
    pair = _mint_pair(user)
    try:
        await db.execute(
            update(User).where(User.id == user.id).values(refresh_token=pair.refresh_token)
        )
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Could not persist refresh token for user %s", user.id)
        raise InternalError("Error generating access token and refresh token") from exc
    return pair


async def authenticate(
    db: AsyncSession, identifier: Optional[str], password: str, *alternates: Optional[str]
) -> Tuple[TokenPair, User]:
    """Verify credentials and open a new session for the user matching any identifier."""
    if not any((value or "").strip() for value in (identifier, *alternates)):
        raise BadRequest("Username or email is required")
    if not password:
        raise BadRequest("Password is required")

    user = await find_user_by_identifier(db, identifier, *alternates)
    if not user:
        logger.info("login_rejected identifier=%s reason=unknown_user", identifier)
        raise Unauthorized("User does not exist")
    if not verify_password(password, user.password):
        logger.info("login_rejected user=%s reason=bad_password", user.id)
        raise InvalidCredentials("Invalid user credentials")

    pair = await issue_token_pair(db, user)
    logger.info("login user=%s", user.id)
    return pair, user


async def refresh(db: AsyncSession, presented: Optional[str]) -> TokenPair:
    """Rotate a refresh token; a superseded token can never be used twice."""
    if not presented:
        raise InvalidToken("Unauthorized request")
    try:
        payload = decode_refresh_token(presented)
    except ValueError as exc:
        raise InvalidToken(str(exc)) from exc

    user = await db.get(User, str(payload["sub"]))
    if not user:
        raise InvalidToken("Invalid refresh token")
    if user.refresh_token != presented:
        logger.info("refresh_rejected user=%s reason=superseded", user.id)
        raise InvalidToken("Refresh token is expired or used")

    pair = _mint_pair(user)
    try:
        result = await db.execute(
            update(User)
            .where(User.id == user.id, User.refresh_token == presented)
            .values(refresh_token=pair.refresh_token)
        )
        if result.rowcount != 1:
            await db.rollback()
            logger.info("refresh_rejected user=%s reason=lost_race", user.id)
            raise InvalidToken("Refresh token is expired or used")
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Could not rotate refresh token for user %s", user.id)
        raise InternalError("Error generating access token and refresh token") from exc
    return pair


async def revoke(db: AsyncSession, user_id: str) -> None:
    """Clear the stored refresh token, ending every session of the user."""
    await db.execute(update(User).where(User.id == user_id).values(refresh_token=None))
    await db.commit()
    logger.info("logout user=%s", user_id)


async def verify_access(db: AsyncSession, token: Optional[str]) -> User:
    """Resolve the user behind an access token."""
    if not token:
        raise Unauthenticated("Unauthorized request")
    try:
        payload = decode_access_token(token)
    except ValueError as exc:
        raise Unauthenticated(str(exc)) from exc

    user = await db.get(User, str(payload["sub"]))
    if not user:
        raise Unauthenticated("Invalid access token")
    return user


async def change_password(db: AsyncSession, user: User, old_password: str, new_password: str) -> None:
    if not (old_password and new_password):
        raise BadRequest("Old password and new password are required")
    if not verify_password(old_password, user.password):
        raise InvalidCredentials("Invalid password")
    user.password = hash_password(new_password)
    await db.commit()
