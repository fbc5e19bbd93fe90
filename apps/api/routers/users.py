"""
User account router: registration, sessions, profile and channel views.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Body, Cookie, Depends, File, Form, Response, UploadFile
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from config import settings
from database import get_db
from models.user import User
from routers.auth_scope import ACCESS_COOKIE, REFRESH_COOKIE, AuthContext, get_auth_context
from routers.rate_limit import rate_limit
from routers.schemas import (
    ApiModel,
    ApiResponse,
    ChannelProfileOut,
    LoginOut,
    TokenPairOut,
    UserOut,
    VideoWithOwnerOut,
    extend_model,
    video_with_owner,
)
from services import credentials, read_models
from services.credentials import TokenPair
from services.crypto import hash_password
from services.errors import BadRequest, Conflict, require_fields
from services.media import MediaHost, get_media_host, staged_upload
from services.notifications import send_welcome_email

router = APIRouter()
logger = logging.getLogger(__name__)


class LoginRequest(ApiModel):
    user_name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class RefreshRequest(ApiModel):
    refresh_token: Optional[str] = None


class ChangePasswordRequest(ApiModel):
    old_password: Optional[str] = None
    new_password: Optional[str] = None


class UpdateAccountRequest(ApiModel):
    full_name: Optional[str] = None
    email: Optional[str] = None


def _set_session_cookies(response: Response, pair: TokenPair) -> None:
    response.set_cookie(
        ACCESS_COOKIE,
        pair.access_token,
        max_age=int(settings.ACCESS_TOKEN_EXPIRY_MINUTES) * 60,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
    )
    response.set_cookie(
        REFRESH_COOKIE,
        pair.refresh_token,
        max_age=int(settings.REFRESH_TOKEN_EXPIRY_DAYS) * 86400,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
    )


def _clear_session_cookies(response: Response) -> None:
    response.delete_cookie(ACCESS_COOKIE, httponly=True, secure=settings.COOKIE_SECURE, samesite="lax")
    response.delete_cookie(REFRESH_COOKIE, httponly=True, secure=settings.COOKIE_SECURE, samesite="lax")


@router.post("/register", response_model=ApiResponse[UserOut], status_code=201)
async def register_user(
    background_tasks: BackgroundTasks,
    user_name: Optional[str] = Form(default=None, alias="userName"),
    email: Optional[str] = Form(default=None),
    full_name: Optional[str] = Form(default=None, alias="fullName"),
    password: Optional[str] = Form(default=None),
    avatar: Optional[UploadFile] = File(default=None),
    cover_image: Optional[UploadFile] = File(default=None, alias="coverImage"),
    _rate_limit: None = Depends(rate_limit("register", "REGISTER_RATE_LIMIT")),
    db: AsyncSession = Depends(get_db),
    media_host: MediaHost = Depends(get_media_host),
):
    """Create an account; the avatar file is mandatory, the cover image optional."""
    require_fields(userName=user_name, email=email, fullName=full_name, password=password)
    normalized_name = user_name.strip().lower()
    email = email.strip()

    existing = await db.execute(
        select(User.id).where(or_(User.email == email, User.user_name == normalized_name)).limit(1)
    )
    if existing.scalar_one_or_none():
        raise Conflict("User already exists")

    if avatar is None or not avatar.filename:
        raise BadRequest("Avatar is required")

    async with staged_upload(avatar) as avatar_path:
        avatar_asset = await media_host.upload(avatar_path, resource_type="image")
    cover_url = None
    if cover_image is not None and cover_image.filename:
        async with staged_upload(cover_image) as cover_path:
            cover_url = (await media_host.upload(cover_path, resource_type="image")).url

    user = User(
        user_name=normalized_name,
        email=email,
        full_name=full_name.strip(),
        avatar=avatar_asset.url,
        cover_image=cover_url,
        password=hash_password(password),
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise Conflict("User already exists") from exc

    background_tasks.add_task(send_welcome_email, user.email)
    logger.info("user_registered user=%s", user.id)
    return ApiResponse.ok(UserOut.model_validate(user), "User created successfully", status_code=201)


@router.post("/login", response_model=ApiResponse[LoginOut])
async def login_user(
    payload: LoginRequest,
    response: Response,
    _rate_limit: None = Depends(rate_limit("login", "LOGIN_RATE_LIMIT")),
    db: AsyncSession = Depends(get_db),
):
    """Authenticate with username or email and open a session."""
    pair, user = await credentials.authenticate(db, payload.email, payload.password, payload.user_name)
    _set_session_cookies(response, pair)
    return ApiResponse.ok(
        LoginOut(
            user=UserOut.model_validate(user),
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
        ),
        "User logged in successfully",
    )


@router.post("/logout", response_model=ApiResponse[dict])
async def logout_user(
    response: Response,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """End every session of the current user."""
    await credentials.revoke(db, auth.user_id)
    _clear_session_cookies(response)
    return ApiResponse.ok({}, "User logged out successfully")


@router.post("/refresh-token", response_model=ApiResponse[TokenPairOut])
async def refresh_access_token(
    response: Response,
    payload: Optional[RefreshRequest] = Body(default=None),
    refresh_cookie: Optional[str] = Cookie(default=None, alias=REFRESH_COOKIE),
    _rate_limit: None = Depends(rate_limit("refresh", "REFRESH_RATE_LIMIT")),
    db: AsyncSession = Depends(get_db),
):
    """Rotate the refresh token presented via cookie or request body."""
    presented = refresh_cookie or (payload.refresh_token if payload else None)
    pair = await credentials.refresh(db, presented)
    _set_session_cookies(response, pair)
    return ApiResponse.ok(
        TokenPairOut(access_token=pair.access_token, refresh_token=pair.refresh_token),
        "Access token refreshed successfully",
    )


@router.post("/change-password", response_model=ApiResponse[dict])
async def change_current_password(
    payload: ChangePasswordRequest,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    await credentials.change_password(db, auth.user, payload.old_password, payload.new_password)
    return ApiResponse.ok({}, "Password changed successfully")


@router.get("/current-user", response_model=ApiResponse[UserOut])
async def get_current_user(auth: AuthContext = Depends(get_auth_context)):
    return ApiResponse.ok(UserOut.model_validate(auth.user), "User retrieved successfully")


@router.patch("/update-account", response_model=ApiResponse[UserOut])
async def update_account_details(
    payload: UpdateAccountRequest,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Update full name and/or email of the current user."""
    full_name = (payload.full_name or "").strip()
    email = (payload.email or "").strip()
    if not (full_name or email):
        raise BadRequest("Full name or email is required")

    user = auth.user
    if full_name:
        user.full_name = full_name
    if email:
        user.email = email
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise Conflict("Email is already in use") from exc
    return ApiResponse.ok(UserOut.model_validate(user), "User updated successfully")


@router.patch("/avatar", response_model=ApiResponse[UserOut])
async def update_avatar(
    avatar: Optional[UploadFile] = File(default=None),
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
    media_host: MediaHost = Depends(get_media_host),
):
    """Replace the avatar and remove the previous asset from the media host."""
    if avatar is None or not avatar.filename:
        raise BadRequest("Avatar file is required")

    user = auth.user
    previous = user.avatar
    async with staged_upload(avatar) as path:
        asset = await media_host.upload(path, resource_type="image")
    if previous:
        await media_host.delete(previous, resource_type="image")

    user.avatar = asset.url
    await db.commit()
    return ApiResponse.ok(UserOut.model_validate(user), "Avatar updated successfully")


@router.patch("/cover-image", response_model=ApiResponse[UserOut])
async def update_cover_image(
    cover_image: Optional[UploadFile] = File(default=None, alias="coverImage"),
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
    media_host: MediaHost = Depends(get_media_host),
):
    if cover_image is None or not cover_image.filename:
        raise BadRequest("Cover image file is required")

    user = auth.user
    previous = user.cover_image
    async with staged_upload(cover_image) as path:
        asset = await media_host.upload(path, resource_type="image")
    if previous:
        await media_host.delete(previous, resource_type="image")

    user.cover_image = asset.url
    await db.commit()
    return ApiResponse.ok(UserOut.model_validate(user), "Cover image updated successfully")


@router.get("/c/{user_name}", response_model=ApiResponse[ChannelProfileOut])
async def get_channel_profile(
    user_name: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Public channel page of ``user_name`` as seen by the current user."""
    if not user_name.strip():
        raise BadRequest("username is missing")
    channel = await read_models.channel_profile(db, user_name, auth.user_id)
    data = extend_model(
        ChannelProfileOut,
        UserOut.model_validate(channel["user"]),
        subscribers_count=channel["subscribers_count"],
        channles_subscribed_to_count=channel["channles_subscribed_to_count"],
        is_subscribed=channel["is_subscribed"],
    )
    return ApiResponse.ok(data, "User channel fetched successfully")


@router.get("/history", response_model=ApiResponse[List[VideoWithOwnerOut]])
async def get_watch_history(
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    entries = await read_models.watch_history(db, auth.user_id)
    videos = [video_with_owner(entry["video"], entry["owner"]) for entry in entries]
    return ApiResponse.ok(videos, "User watch history fetched successfully")
