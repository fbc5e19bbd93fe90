"""
Playlist router.

A playlist holds each video at most once; adding a video that is already
present leaves the playlist unchanged.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy import delete, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from database import get_db
from models.playlist import Playlist, PlaylistVideo
from models.user import User
from models.video import Video
from routers.auth_scope import AuthContext, ensure_object_id, ensure_owner, get_auth_context
from routers.schemas import ApiModel, ApiResponse, PlaylistOut, extend_model
from services.errors import BadRequest, NotFound, require_fields

router = APIRouter()
logger = logging.getLogger(__name__)


class CreatePlaylistRequest(ApiModel):
    name: Optional[str] = None
    description: Optional[str] = None


class UpdatePlaylistRequest(ApiModel):
    name: Optional[str] = None
    description: Optional[str] = None


async def _load_playlist(db: AsyncSession, playlist_id: str) -> Playlist:
    ensure_object_id(playlist_id, "playlist")
    playlist = await db.get(Playlist, playlist_id)
    if not playlist:
        raise NotFound("Playlist not found")
    return playlist


async def _playlist_video_ids(db: AsyncSession, playlist_id: str) -> List[str]:
    result = await db.execute(
        select(PlaylistVideo.video_id)
        .where(PlaylistVideo.playlist_id == playlist_id)
        .order_by(PlaylistVideo.position, PlaylistVideo.added_at)
    )
    return list(result.scalars().all())


async def _serialize(db: AsyncSession, playlist: Playlist) -> PlaylistOut:
    return extend_model(
        PlaylistOut,
        PlaylistOut.model_validate(playlist),
        videos=await _playlist_video_ids(db, playlist.id),
    )


@router.post("/", response_model=ApiResponse[PlaylistOut], status_code=201)
async def create_playlist(
    payload: CreatePlaylistRequest,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    require_fields(name=payload.name, description=payload.description)
    playlist = Playlist(
        name=payload.name.strip(),
        description=payload.description.strip(),
        owner_id=auth.user_id,
    )
    db.add(playlist)
    await db.commit()
    return ApiResponse.ok(await _serialize(db, playlist), "Playlist created successfully", status_code=201)


@router.get("/user/{user_id}", response_model=ApiResponse[List[PlaylistOut]])
async def get_user_playlists(
    user_id: str,
    _auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    ensure_object_id(user_id, "user")
    if not await db.get(User, user_id):
        raise NotFound("User not found")

    result = await db.execute(
        select(Playlist)
        .where(Playlist.owner_id == user_id)
        .order_by(Playlist.created_at.desc(), Playlist.id.desc())
    )
    playlists = [await _serialize(db, playlist) for playlist in result.scalars().all()]
    return ApiResponse.ok(playlists, "Playlists fetched successfully")


@router.get("/{playlist_id}", response_model=ApiResponse[PlaylistOut])
async def get_playlist(
    playlist_id: str,
    _auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    playlist = await _load_playlist(db, playlist_id)
    return ApiResponse.ok(await _serialize(db, playlist), "Playlist fetched successfully")


@router.patch("/add/{video_id}/{playlist_id}", response_model=ApiResponse[PlaylistOut])
async def add_video_to_playlist(
    video_id: str,
    playlist_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Append a video; a video already in the playlist is left where it is."""
    ensure_object_id(video_id, "video")
    playlist = await _load_playlist(db, playlist_id)
    ensure_owner(auth, playlist.owner_id)
    if not await db.get(Video, video_id):
        raise NotFound("Video not found")

    existing = await db.get(PlaylistVideo, (playlist.id, video_id))
    if existing is None:
        last_position = await db.scalar(
            select(func.coalesce(func.max(PlaylistVideo.position), 0)).where(
                PlaylistVideo.playlist_id == playlist.id
            )
        )
        db.add(PlaylistVideo(playlist_id=playlist.id, video_id=video_id, position=int(last_position or 0) + 1))
        try:
            await db.commit()
        except IntegrityError:
            # Added concurrently by another request.
            await db.rollback()
            await db.refresh(playlist)
    return ApiResponse.ok(await _serialize(db, playlist), "Video added to playlist successfully")


@router.patch("/remove/{video_id}/{playlist_id}", response_model=ApiResponse[PlaylistOut])
async def remove_video_from_playlist(
    video_id: str,
    playlist_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    ensure_object_id(video_id, "video")
    playlist = await _load_playlist(db, playlist_id)
    ensure_owner(auth, playlist.owner_id)

    await db.execute(
        delete(PlaylistVideo).where(
            PlaylistVideo.playlist_id == playlist.id,
            PlaylistVideo.video_id == video_id,
        )
    )
    await db.commit()
    return ApiResponse.ok(await _serialize(db, playlist), "Video removed from playlist successfully")


@router.patch("/{playlist_id}", response_model=ApiResponse[PlaylistOut])
async def update_playlist(
    playlist_id: str,
    payload: UpdatePlaylistRequest,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    playlist = await _load_playlist(db, playlist_id)
    ensure_owner(auth, playlist.owner_id)

    name = (payload.name or "").strip()
    description = (payload.description or "").strip()
    if not (name or description):
        raise BadRequest("Name or description is required")
    if name:
        playlist.name = name
    if description:
        playlist.description = description
    await db.commit()
    return ApiResponse.ok(await _serialize(db, playlist), "Playlist updated successfully")


@router.delete("/{playlist_id}", response_model=ApiResponse[dict])
async def delete_playlist(
    playlist_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    playlist = await _load_playlist(db, playlist_id)
    ensure_owner(auth, playlist.owner_id)

    await db.execute(delete(PlaylistVideo).where(PlaylistVideo.playlist_id == playlist.id))
    await db.execute(delete(Playlist).where(Playlist.id == playlist.id))
    await db.commit()
    logger.info("playlist_deleted playlist=%s owner=%s", playlist.id, auth.user_id)
    return ApiResponse.ok({}, "Playlist deleted successfully")
