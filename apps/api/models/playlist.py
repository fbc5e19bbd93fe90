"""Playlist model and its ordered video membership."""

from sqlalchemy import Column, String, DateTime, ForeignKey, Integer, Text

from database import Base
from models.common import new_object_id, utcnow


class Playlist(Base):
    """Named, owner-curated collection of videos."""

    __tablename__ = "playlists"

    id = Column(String(24), primary_key=True, default=new_object_id)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    owner_id = Column(String(24), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class PlaylistVideo(Base):
    """Set membership of a video in a playlist; position keeps insertion order."""

    __tablename__ = "playlist_videos"

    playlist_id = Column(String(24), ForeignKey("playlists.id", ondelete="CASCADE"), primary_key=True)
    video_id = Column(String(24), ForeignKey("videos.id", ondelete="CASCADE"), primary_key=True)
    position = Column(Integer, nullable=False, default=0)
    added_at = Column(DateTime(timezone=True), default=utcnow)
