"""Channel dashboard for the signed-in owner."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from routers.auth_scope import AuthContext, get_auth_context
from routers.schemas import (
    ApiResponse,
    ChannelStatsOut,
    ChannelVideoOut,
    UserOut,
    channel_video,
    extend_model,
    video_with_likes,
)
from services import read_models

router = APIRouter()


@router.get("/stats", response_model=ApiResponse[ChannelStatsOut])
async def get_channel_stats(
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Totals for the channel plus every video with its like count."""
    stats = await read_models.channel_stats(db, auth.user_id)
    data = extend_model(
        ChannelStatsOut,
        UserOut.model_validate(stats["user"]),
        videos=[video_with_likes(item["video"], item["total_likes"]) for item in stats["videos"]],
        total_videos=stats["total_videos"],
        total_subscribers=stats["total_subscribers"],
        total_channles_subscribed_to=stats["total_channles_subscribed_to"],
        total_playlists=stats["total_playlists"],
    )
    return ApiResponse.ok(data, "Channel stats fetched successfully")


@router.get("/videos", response_model=ApiResponse[List[ChannelVideoOut]])
async def get_channel_videos(
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    videos = await read_models.channel_videos(db, auth.user_id)
    data = [channel_video(item["video"], item["total_likes"], item["owner"]) for item in videos]
    return ApiResponse.ok(data, "Channel videos fetched successfully")
