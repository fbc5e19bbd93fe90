"""Comment model."""

from sqlalchemy import Column, String, DateTime, ForeignKey, Text

from database import Base
from models.common import new_object_id, utcnow


class Comment(Base):
    """Comment left on a video."""

    __tablename__ = "comments"

    id = Column(String(24), primary_key=True, default=new_object_id)
    content = Column(Text, nullable=False)
    video_id = Column(String(24), ForeignKey("videos.id", ondelete="CASCADE"), nullable=False, index=True)
    owner_id = Column(String(24), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
