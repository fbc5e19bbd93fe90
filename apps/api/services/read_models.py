"""
Composite read queries over the entity store.

Each builder here is a statically composed SQLAlchemy statement that joins
several tables and derives counts in the database. Results come back in one of
four shapes: a single document, a list, a list with its count, or a page with
the total number of matching rows.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import Select, asc, desc, func, literal, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import aliased

from config import settings
from models.comment import Comment
from models.like import Like
from models.playlist import Playlist
from models.subscription import Subscription
from models.user import User
from models.video import Video
from models.watch_history import WatchHistoryEntry
from services.errors import BadRequest, NotFound


SORTABLE_VIDEO_FIELDS = {
    "createdAt": Video.created_at,
    "updatedAt": Video.updated_at,
    "title": Video.title,
    "duration": Video.duration,
    "views": Video.views,
}


@dataclass
class Page:
    results: List[Any] = field(default_factory=list)
    total_count: int = 0
    page: int = 1
    limit: int = 10

    @property
    def total_pages(self) -> int:
        if not self.total_count:
            return 0
        return (self.total_count + self.limit - 1) // self.limit


def _video_like_count(video):
    return (
        select(func.count(Like.id))
        .where(Like.video_id == video.id)
        .correlate(video)
        .scalar_subquery()
    )


def _owner_profile(owner_id, full_name, user_name, avatar) -> Optional[Dict[str, Any]]:
    if owner_id is None:
        return None
    return {"id": owner_id, "full_name": full_name, "user_name": user_name, "avatar": avatar}


def resolve_page_params(page: Any = None, limit: Any = None) -> Tuple[int, int]:
    """Validate page/limit; limit is clamped to MAX_PAGE_SIZE."""
    try:
        page_value = int(page) if page not in (None, "") else 1
        limit_value = int(limit) if limit not in (None, "") else int(settings.DEFAULT_PAGE_SIZE)
    except (TypeError, ValueError) as exc:
        raise BadRequest("page and limit must be positive integers") from exc
    if page_value < 1 or limit_value < 1:
        raise BadRequest("page and limit must be positive integers")
    return page_value, min(limit_value, int(settings.MAX_PAGE_SIZE))


async def paginate(db: AsyncSession, stmt: Select, page: int, limit: int) -> Page:
    """Run a filtered, sorted statement as one page plus the unpaginated total."""
    total = await db.scalar(select(func.count()).select_from(stmt.order_by(None).subquery()))
    result = await db.execute(stmt.offset((page - 1) * limit).limit(limit))
    return Page(results=list(result.scalars().all()), total_count=int(total or 0), page=page, limit=limit)


def video_listing_query(
    *,
    query: Optional[str] = None,
    owner_id: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_type: Optional[str] = None,
    include_unpublished: bool = False,
) -> Select:
    """Filter videos by text and owner, newest first unless told otherwise."""
    column = SORTABLE_VIDEO_FIELDS.get(sort_by or "createdAt")
    if column is None:
        raise BadRequest(f"sortBy must be one of: {', '.join(sorted(SORTABLE_VIDEO_FIELDS))}")
    direction = (sort_type or "desc").lower()
    if direction not in {"asc", "desc"}:
        raise BadRequest("sortType must be 'asc' or 'desc'")
    order = asc if direction == "asc" else desc

    stmt = select(Video)
    if owner_id:
        stmt = stmt.where(Video.owner_id == owner_id)
    if not include_unpublished:
        stmt = stmt.where(Video.is_published.is_(True))
    text = (query or "").strip()
    if text:
        pattern = f"%{text}%"
        stmt = stmt.where(or_(Video.title.ilike(pattern), Video.description.ilike(pattern)))
    return stmt.order_by(order(column), order(Video.id))


def video_comments_query(video_id: str) -> Select:
    return (
        select(Comment)
        .where(Comment.video_id == video_id)
        .order_by(Comment.created_at.desc(), Comment.id.desc())
    )


async def channel_stats(db: AsyncSession, user_id: str) -> Dict[str, Any]:
    """Summarize a channel: its videos with like counts and relation totals."""
    total_subscribers = (
        select(func.count(Subscription.id))
        .where(Subscription.channel_id == User.id)
        .correlate(User)
        .scalar_subquery()
    )
    total_subscribed_to = (
        select(func.count(Subscription.id))
        .where(Subscription.subscriber_id == User.id)
        .correlate(User)
        .scalar_subquery()
    )
    total_playlists = (
        select(func.count(Playlist.id))
        .where(Playlist.owner_id == User.id)
        .correlate(User)
        .scalar_subquery()
    )
    stmt = (
        select(
            User,
            Video,
            _video_like_count(Video).label("total_likes"),
            total_subscribers.label("total_subscribers"),
            total_subscribed_to.label("total_subscribed_to"),
            total_playlists.label("total_playlists"),
        )
        .select_from(User)
        .outerjoin(Video, Video.owner_id == User.id)
        .where(User.id == user_id)
        .order_by(Video.created_at.desc(), Video.id.desc())
    )
    rows = (await db.execute(stmt)).all()
    if not rows:
        raise NotFound("Channel does not exist")

    first = rows[0]
    videos = [
        {"video": row[1], "total_likes": int(row.total_likes or 0)}
        for row in rows
        if row[1] is not None
    ]
    return {
        "user": first[0],
        "videos": videos,
        "total_videos": len(videos),
        "total_subscribers": int(first.total_subscribers or 0),
        "total_channles_subscribed_to": int(first.total_subscribed_to or 0),
        "total_playlists": int(first.total_playlists or 0),
    }


async def channel_profile(db: AsyncSession, user_name: str, viewer_id: Optional[str]) -> Dict[str, Any]:
    """Public channel page with subscription counts and the viewer's status."""
    subscribers_count = (
        select(func.count(Subscription.id))
        .where(Subscription.channel_id == User.id)
        .correlate(User)
        .scalar_subquery()
    )
    subscribed_to_count = (
        select(func.count(Subscription.id))
        .where(Subscription.subscriber_id == User.id)
        .correlate(User)
        .scalar_subquery()
    )
    if viewer_id:
        is_subscribed = (
            select(Subscription.id)
            .where(Subscription.channel_id == User.id, Subscription.subscriber_id == viewer_id)
            .correlate(User)
            .exists()
        )
    else:
        is_subscribed = literal(False)

    stmt = select(
        User,
        subscribers_count.label("subscribers_count"),
        subscribed_to_count.label("subscribed_to_count"),
        is_subscribed.label("is_subscribed"),
    ).where(User.user_name == (user_name or "").strip().lower())
    row = (await db.execute(stmt)).first()
    if not row:
        raise NotFound("Channel does not exist")

    return {
        "user": row[0],
        "subscribers_count": int(row.subscribers_count or 0),
        "channles_subscribed_to_count": int(row.subscribed_to_count or 0),
        "is_subscribed": bool(row.is_subscribed),
    }


async def watch_history(db: AsyncSession, user_id: str) -> List[Dict[str, Any]]:
    """Resolve a user's ordered watch history with each video's owner."""
    owner = aliased(User)
    stmt = (
        select(User.id, Video, owner.id, owner.full_name, owner.user_name, owner.avatar)
        .select_from(User)
        .outerjoin(WatchHistoryEntry, WatchHistoryEntry.user_id == User.id)
        .outerjoin(Video, Video.id == WatchHistoryEntry.video_id)
        .outerjoin(owner, owner.id == Video.owner_id)
        .where(User.id == user_id)
        .order_by(WatchHistoryEntry.position)
    )
    rows = (await db.execute(stmt)).all()
    if not rows:
        raise NotFound("Watch history not found")

    return [
        {"video": row[1], "owner": _owner_profile(row[2], row[3], row[4], row[5])}
        for row in rows
        if row[1] is not None
    ]


async def channel_subscribers(db: AsyncSession, channel_id: str) -> Dict[str, Any]:
    stmt = (
        select(User)
        .join(Subscription, Subscription.subscriber_id == User.id)
        .where(Subscription.channel_id == channel_id)
        .order_by(Subscription.created_at.desc(), Subscription.id.desc())
    )
    subscribers = list((await db.execute(stmt)).scalars().all())
    return {"subscribers": subscribers, "total_subscribers": len(subscribers)}


async def subscribed_channels(db: AsyncSession, subscriber_id: str) -> Dict[str, Any]:
    stmt = (
        select(User)
        .join(Subscription, Subscription.channel_id == User.id)
        .where(Subscription.subscriber_id == subscriber_id)
        .order_by(Subscription.created_at.desc(), Subscription.id.desc())
    )
    channels = list((await db.execute(stmt)).scalars().all())
    return {"channels": channels, "total_channels": len(channels)}


async def liked_videos(db: AsyncSession, user_id: str) -> Dict[str, Any]:
    """Published videos the user has liked, most recently liked first."""
    stmt = (
        select(Video)
        .join(Like, Like.video_id == Video.id)
        .where(Like.owner_id == user_id, Video.is_published.is_(True))
        .order_by(Like.created_at.desc(), Like.id.desc())
    )
    videos = list((await db.execute(stmt)).scalars().unique().all())
    return {"liked_videos": videos, "total_liked_videos": len(videos)}


async def channel_videos(db: AsyncSession, user_id: str) -> List[Dict[str, Any]]:
    """Every video of a channel, including unpublished ones, with like counts and owner details."""
    stmt = (
        select(
            Video,
            _video_like_count(Video).label("total_likes"),
            User.id,
            User.full_name,
            User.user_name,
            User.avatar,
        )
        .join(User, User.id == Video.owner_id)
        .where(Video.owner_id == user_id)
        .order_by(Video.created_at.desc(), Video.id.desc())
    )
    rows = (await db.execute(stmt)).all()
    return [
        {
            "video": row[0],
            "total_likes": int(row.total_likes or 0),
            "owner": _owner_profile(row[2], row[3], row[4], row[5]),
        }
        for row in rows
    ]
