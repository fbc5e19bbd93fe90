"""Ordered watch history entries."""

from sqlalchemy import Column, String, DateTime, ForeignKey, Integer

from database import Base
from models.common import utcnow


class WatchHistoryEntry(Base):
    __tablename__ = "watch_history"

    user_id = Column(String(24), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    video_id = Column(String(24), ForeignKey("videos.id", ondelete="CASCADE"), primary_key=True)
    position = Column(Integer, nullable=False, default=0)
    watched_at = Column(DateTime(timezone=True), default=utcnow)
