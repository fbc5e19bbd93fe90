"""
Video router: listing, publishing, viewing and owner-only maintenance.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from models.video import Video
from routers.auth_scope import AuthContext, ensure_object_id, ensure_owner, get_auth_context
from routers.schemas import ApiResponse, PageOut, VideoOut, page_out
from services import read_models
from services.errors import BadRequest, NotFound, require_fields
from services.media import MediaHost, get_media_host, staged_upload
from services.videos import delete_video, record_view

router = APIRouter()
logger = logging.getLogger(__name__)


async def _load_video(db: AsyncSession, video_id: str) -> Video:
    ensure_object_id(video_id, "video")
    video = await db.get(Video, video_id)
    if not video:
        raise NotFound("Video not found")
    return video


@router.get("/", response_model=ApiResponse[PageOut[VideoOut]])
async def list_videos(
    page: Optional[int] = Query(default=None),
    limit: Optional[int] = Query(default=None),
    query: Optional[str] = Query(default=None),
    sort_by: Optional[str] = Query(default=None, alias="sortBy"),
    sort_type: Optional[str] = Query(default=None, alias="sortType"),
    user_id: Optional[str] = Query(default=None, alias="userId"),
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """
    Search videos by title/description, optionally scoped to one channel.

    Unpublished videos are only listed when the caller asks for their own channel.
    """
    page_number, page_size = read_models.resolve_page_params(page, limit)
    if user_id:
        ensure_object_id(user_id, "user")
    stmt = read_models.video_listing_query(
        query=query,
        owner_id=user_id,
        sort_by=sort_by,
        sort_type=sort_type,
        include_unpublished=bool(user_id) and user_id == auth.user_id,
    )
    result = await read_models.paginate(db, stmt, page_number, page_size)
    return ApiResponse.ok(page_out(result, VideoOut), "Videos fetched successfully")


@router.post("/", response_model=ApiResponse[VideoOut], status_code=201)
async def publish_video(
    title: Optional[str] = Form(default=None),
    description: Optional[str] = Form(default=None),
    video_file: Optional[UploadFile] = File(default=None, alias="videoFile"),
    thumbnail: Optional[UploadFile] = File(default=None),
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
    media_host: MediaHost = Depends(get_media_host),
):
    require_fields(title=title, description=description)
    if video_file is None or not video_file.filename:
        raise BadRequest("Video file is required")
    if thumbnail is None or not thumbnail.filename:
        raise BadRequest("Thumbnail is required")

    async with staged_upload(video_file) as video_path:
        video_asset = await media_host.upload(video_path, resource_type="video")
    async with staged_upload(thumbnail) as thumbnail_path:
        thumbnail_asset = await media_host.upload(thumbnail_path, resource_type="image")

    video = Video(
        owner_id=auth.user_id,
        video_file=video_asset.url,
        thumbnail=thumbnail_asset.url,
        title=title.strip(),
        description=description.strip(),
        duration=video_asset.duration or 0,
    )
    db.add(video)
    await db.commit()
    logger.info("video_published video=%s owner=%s", video.id, auth.user_id)
    return ApiResponse.ok(VideoOut.model_validate(video), "Video published successfully", status_code=201)


@router.get("/{video_id}", response_model=ApiResponse[VideoOut])
async def get_video(
    video_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Fetch a video; viewing it counts a view and updates watch history."""
    video = await _load_video(db, video_id)
    if not video.is_published and video.owner_id != auth.user_id:
        raise NotFound("Video not found")

    await record_view(db, auth.user_id, video.id)
    await db.refresh(video)
    return ApiResponse.ok(VideoOut.model_validate(video), "Video fetched successfully")


@router.patch("/{video_id}", response_model=ApiResponse[VideoOut])
async def update_video(
    video_id: str,
    title: Optional[str] = Form(default=None),
    description: Optional[str] = Form(default=None),
    thumbnail: Optional[UploadFile] = File(default=None),
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
    media_host: MediaHost = Depends(get_media_host),
):
    video = await _load_video(db, video_id)
    ensure_owner(auth, video.owner_id)

    has_thumbnail = thumbnail is not None and bool(thumbnail.filename)
    title = (title or "").strip()
    description = (description or "").strip()
    if not (title or description or has_thumbnail):
        raise BadRequest("Title, description or thumbnail is required")

    if has_thumbnail:
        async with staged_upload(thumbnail) as path:
            asset = await media_host.upload(path, resource_type="image")
        await media_host.delete(video.thumbnail, resource_type="image")
        video.thumbnail = asset.url
    if title:
        video.title = title
    if description:
        video.description = description
    await db.commit()
    return ApiResponse.ok(VideoOut.model_validate(video), "Video updated successfully")


@router.delete("/{video_id}", response_model=ApiResponse[dict])
async def remove_video(
    video_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
    media_host: MediaHost = Depends(get_media_host),
):
    video = await _load_video(db, video_id)
    ensure_owner(auth, video.owner_id)
    await delete_video(db, video, media_host)
    return ApiResponse.ok({}, "Video deleted successfully")


@router.patch("/toggle/publish/{video_id}", response_model=ApiResponse[VideoOut])
async def toggle_publish_status(
    video_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    video = await _load_video(db, video_id)
    ensure_owner(auth, video.owner_id)
    video.is_published = not video.is_published
    await db.commit()
    state = "published" if video.is_published else "unpublished"
    return ApiResponse.ok(VideoOut.model_validate(video), f"Video {state} successfully")
