"""Video model for uploaded videos."""

from sqlalchemy import Boolean, Column, String, DateTime, Float, ForeignKey, Integer, Text

from database import Base
from models.common import new_object_id, utcnow


class Video(Base):
    """Video published by a channel owner."""

    __tablename__ = "videos"

    id = Column(String(24), primary_key=True, default=new_object_id)
    owner_id = Column(String(24), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    video_file = Column(String, nullable=False)
    thumbnail = Column(String, nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    duration = Column(Float, nullable=False, default=0)
    views = Column(Integer, nullable=False, default=0)
    is_published = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
