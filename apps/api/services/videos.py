"""Video lifecycle helpers shared by routers."""

from __future__ import annotations

import logging

from sqlalchemy import delete, func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from models.comment import Comment
from models.like import Like
from models.playlist import PlaylistVideo
from models.video import Video
from models.watch_history import WatchHistoryEntry
from services.media import MediaHost

logger = logging.getLogger(__name__)


async def record_view(db: AsyncSession, user_id: str, video_id: str) -> None:
    """Count a view and move the video to the end of the viewer's history."""
    await db.execute(update(Video).where(Video.id == video_id).values(views=Video.views + 1))
    await db.execute(
        delete(WatchHistoryEntry).where(
            WatchHistoryEntry.user_id == user_id,
            WatchHistoryEntry.video_id == video_id,
        )
    )
    last_position = await db.scalar(
        select(func.coalesce(func.max(WatchHistoryEntry.position), 0)).where(
            WatchHistoryEntry.user_id == user_id
        )
    )
    db.add(WatchHistoryEntry(user_id=user_id, video_id=video_id, position=int(last_position or 0) + 1))
    await db.commit()


async def delete_video(db: AsyncSession, video: Video, media_host: MediaHost) -> None:
    """Remove a video, its media assets and every row that references it."""
    await media_host.delete(video.video_file, resource_type="video")
    await media_host.delete(video.thumbnail, resource_type="image")

    comment_ids = select(Comment.id).where(Comment.video_id == video.id)
    await db.execute(delete(Like).where(Like.comment_id.in_(comment_ids)))
    await db.execute(delete(Like).where(Like.video_id == video.id))
    await db.execute(delete(Comment).where(Comment.video_id == video.id))
    await db.execute(delete(PlaylistVideo).where(PlaylistVideo.video_id == video.id))
    await db.execute(delete(WatchHistoryEntry).where(WatchHistoryEntry.video_id == video.id))
    await db.execute(delete(Video).where(Video.id == video.id))
    await db.commit()
    logger.info("video_deleted video=%s owner=%s", video.id, video.owner_id)
