"""Subscription model."""

from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint

from database import Base
from models.common import new_object_id, utcnow


class Subscription(Base):
    """A subscriber following another user's channel."""

    __tablename__ = "subscriptions"
    __table_args__ = (
        UniqueConstraint("subscriber_id", "channel_id", name="uq_subscription_pair"),
    )

    id = Column(String(24), primary_key=True, default=new_object_id)
    subscriber_id = Column(String(24), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    channel_id = Column(String(24), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
