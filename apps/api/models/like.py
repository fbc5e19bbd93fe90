"""Like model; a row's existence means the target is liked."""

from sqlalchemy import CheckConstraint, Column, String, DateTime, ForeignKey, UniqueConstraint

from database import Base
from models.common import new_object_id, utcnow


class Like(Base):
    """Like on exactly one of a video, comment or tweet."""

    __tablename__ = "likes"
    __table_args__ = (
        UniqueConstraint("owner_id", "video_id", name="uq_like_owner_video"),
        UniqueConstraint("owner_id", "comment_id", name="uq_like_owner_comment"),
        UniqueConstraint("owner_id", "tweet_id", name="uq_like_owner_tweet"),
        CheckConstraint(
            "(CASE WHEN video_id IS NULL THEN 0 ELSE 1 END"
            " + CASE WHEN comment_id IS NULL THEN 0 ELSE 1 END"
            " + CASE WHEN tweet_id IS NULL THEN 0 ELSE 1 END) = 1",
            name="ck_like_single_target",
        ),
    )

    id = Column(String(24), primary_key=True, default=new_object_id)
    owner_id = Column(String(24), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    video_id = Column(String(24), ForeignKey("videos.id", ondelete="CASCADE"), nullable=True, index=True)
    comment_id = Column(String(24), ForeignKey("comments.id", ondelete="CASCADE"), nullable=True, index=True)
    tweet_id = Column(String(24), ForeignKey("tweets.id", ondelete="CASCADE"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
