"""User model."""

from sqlalchemy import Column, String, DateTime, Text

from database import Base
from models.common import new_object_id, utcnow


class User(Base):
    """Registered account that owns a channel."""

    __tablename__ = "users"

    id = Column(String(24), primary_key=True, default=new_object_id)
    user_name = Column(String, unique=True, nullable=False, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    full_name = Column(String, nullable=False)
    avatar = Column(String, nullable=False)
    cover_image = Column(String, nullable=True)
    password = Column(String, nullable=False)
    refresh_token = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
