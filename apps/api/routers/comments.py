"""Comment router."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from models.comment import Comment
from models.like import Like
from models.video import Video
from routers.auth_scope import AuthContext, ensure_object_id, ensure_owner, get_auth_context
from routers.schemas import ApiModel, ApiResponse, CommentOut, PageOut, page_out
from services import read_models
from services.errors import NotFound, require_fields

router = APIRouter()
logger = logging.getLogger(__name__)


class CommentRequest(ApiModel):
    content: Optional[str] = None


async def _load_comment(db: AsyncSession, comment_id: str) -> Comment:
    ensure_object_id(comment_id, "comment")
    comment = await db.get(Comment, comment_id)
    if not comment:
        raise NotFound("Comment not found")
    return comment


@router.get("/{video_id}", response_model=ApiResponse[PageOut[CommentOut]])
async def get_video_comments(
    video_id: str,
    page: Optional[int] = Query(default=None),
    limit: Optional[int] = Query(default=None),
    _auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Comments of a video, newest first."""
    ensure_object_id(video_id, "video")
    page_number, page_size = read_models.resolve_page_params(page, limit)
    if not await db.get(Video, video_id):
        raise NotFound("Video not found")
    result = await read_models.paginate(db, read_models.video_comments_query(video_id), page_number, page_size)
    return ApiResponse.ok(page_out(result, CommentOut), "Comments fetched successfully")


@router.post("/{video_id}", response_model=ApiResponse[CommentOut], status_code=201)
async def add_comment(
    video_id: str,
    payload: CommentRequest,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    ensure_object_id(video_id, "video")
    require_fields(content=payload.content)
    if not await db.get(Video, video_id):
        raise NotFound("Video not found")

    comment = Comment(content=payload.content.strip(), video_id=video_id, owner_id=auth.user_id)
    db.add(comment)
    await db.commit()
    return ApiResponse.ok(CommentOut.model_validate(comment), "Comment added successfully", status_code=201)


@router.patch("/c/{comment_id}", response_model=ApiResponse[CommentOut])
async def update_comment(
    comment_id: str,
    payload: CommentRequest,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    comment = await _load_comment(db, comment_id)
    ensure_owner(auth, comment.owner_id)
    require_fields(content=payload.content)

    comment.content = payload.content.strip()
    await db.commit()
    return ApiResponse.ok(CommentOut.model_validate(comment), "Comment updated successfully")


@router.delete("/c/{comment_id}", response_model=ApiResponse[dict])
async def delete_comment(
    comment_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Delete a comment together with the likes it received."""
    comment = await _load_comment(db, comment_id)
    ensure_owner(auth, comment.owner_id)

    await db.execute(delete(Like).where(Like.comment_id == comment.id))
    await db.execute(delete(Comment).where(Comment.id == comment.id))
    await db.commit()
    return ApiResponse.ok({}, "Comment deleted successfully")
