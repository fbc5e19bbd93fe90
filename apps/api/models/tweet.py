"""Tweet model."""

from sqlalchemy import Column, String, DateTime, ForeignKey, Text

from database import Base
from models.common import new_object_id, utcnow


class Tweet(Base):
    __tablename__ = "tweets"

    id = Column(String(24), primary_key=True, default=new_object_id)
    content = Column(Text, nullable=False)
    owner_id = Column(String(24), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
