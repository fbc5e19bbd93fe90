"""
Like toggles for videos, comments and tweets.

A toggle answers 201 with the new like when it was created and 200 with an
empty object when an existing like was removed.
"""

import logging
from typing import Any, Dict, Union

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from models.comment import Comment
from models.like import Like
from models.tweet import Tweet
from models.video import Video
from routers.auth_scope import AuthContext, ensure_object_id, get_auth_context
from routers.schemas import ApiResponse, LikedVideosOut, LikeOut
from services import read_models
from services.errors import NotFound
from services.toggles import toggle_relation

router = APIRouter()
logger = logging.getLogger(__name__)

ToggleResponse = ApiResponse[Union[LikeOut, Dict[str, Any]]]


async def _toggle_like(
    db: AsyncSession,
    response: Response,
    auth: AuthContext,
    model,
    target_id: str,
    label: str,
    **match: str,
) -> ApiResponse:
    ensure_object_id(target_id, label)
    if not await db.get(model, target_id):
        raise NotFound(f"{label.capitalize()} not found")

    result = await toggle_relation(db, Like, owner_id=auth.user_id, **match)
    if result.removed:
        response.status_code = 200
        return ApiResponse.ok({}, f"{label.capitalize()} unliked successfully")

    response.status_code = 201
    return ApiResponse.ok(
        LikeOut.model_validate(result.created),
        f"{label.capitalize()} liked successfully",
        status_code=201,
    )


@router.post("/toggle/v/{video_id}", response_model=ToggleResponse)
async def toggle_video_like(
    video_id: str,
    response: Response,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await _toggle_like(db, response, auth, Video, video_id, "video", video_id=video_id)


@router.post("/toggle/c/{comment_id}", response_model=ToggleResponse)
async def toggle_comment_like(
    comment_id: str,
    response: Response,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await _toggle_like(db, response, auth, Comment, comment_id, "comment", comment_id=comment_id)


@router.post("/toggle/t/{tweet_id}", response_model=ToggleResponse)
async def toggle_tweet_like(
    tweet_id: str,
    response: Response,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await _toggle_like(db, response, auth, Tweet, tweet_id, "tweet", tweet_id=tweet_id)


@router.get("/videos", response_model=ApiResponse[LikedVideosOut])
async def get_liked_videos(
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Published videos liked by the current user."""
    liked = await read_models.liked_videos(db, auth.user_id)
    return ApiResponse.ok(LikedVideosOut.model_validate(liked), "Liked videos fetched successfully")
