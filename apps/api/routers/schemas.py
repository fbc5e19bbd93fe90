"""Response envelope and camelCase API representations."""

from datetime import datetime
from typing import Any, Generic, List, Optional, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


DataT = TypeVar("DataT")


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ApiResponse(ApiModel, Generic[DataT]):
    """Uniform success envelope."""

    status_code: int = 200
    data: DataT
    message: str = "Success"
    success: bool = True

    @classmethod
    def ok(cls, data: Any, message: str, status_code: int = 200) -> "ApiResponse":
        return cls(status_code=status_code, data=data, message=message, success=status_code < 400)


class OwnerProfile(ApiModel):
    id: str = Field(alias="_id")
    full_name: str
    user_name: str
    avatar: Optional[str] = None


class UserOut(ApiModel):
    """Public user document; password and refresh token are never part of it."""

    id: str = Field(alias="_id")
    user_name: str
    email: str
    full_name: str
    avatar: Optional[str] = None
    cover_image: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class VideoOut(ApiModel):
    id: str = Field(alias="_id")
    video_file: str
    thumbnail: str
    title: str
    description: str
    duration: float = 0
    views: int = 0
    is_published: bool = True
    owner: Optional[str] = Field(default=None, validation_alias="owner_id")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class VideoWithLikesOut(VideoOut):
    total_likes: int = 0


class VideoWithOwnerOut(VideoOut):
    owner: Optional[OwnerProfile] = None


class ChannelVideoOut(VideoWithLikesOut):
    owner: Optional[OwnerProfile] = None


class CommentOut(ApiModel):
    id: str = Field(alias="_id")
    content: str
    video: str = Field(validation_alias="video_id")
    owner: str = Field(validation_alias="owner_id")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class LikeOut(ApiModel):
    id: str = Field(alias="_id")
    liked_by: str = Field(validation_alias=AliasChoices("owner_id", "liked_by", "likedBy"))
    video: Optional[str] = Field(default=None, validation_alias="video_id")
    comment: Optional[str] = Field(default=None, validation_alias="comment_id")
    tweet: Optional[str] = Field(default=None, validation_alias="tweet_id")
    created_at: Optional[datetime] = None


class TweetOut(ApiModel):
    id: str = Field(alias="_id")
    content: str
    owner: str = Field(validation_alias="owner_id")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PlaylistOut(ApiModel):
    id: str = Field(alias="_id")
    name: str
    description: str
    owner: str = Field(validation_alias="owner_id")
    videos: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SubscriptionOut(ApiModel):
    id: str = Field(alias="_id")
    subscriber: str = Field(validation_alias="subscriber_id")
    channel: str = Field(validation_alias="channel_id")
    created_at: Optional[datetime] = None


class ChannelProfileOut(UserOut):
    subscribers_count: int = 0
    channles_subscribed_to_count: int = 0
    is_subscribed: bool = False


class ChannelStatsOut(UserOut):
    videos: List[VideoWithLikesOut] = Field(default_factory=list)
    total_videos: int = 0
    total_subscribers: int = 0
    total_channles_subscribed_to: int = 0
    total_playlists: int = 0


class SubscriberListOut(ApiModel):
    subscribers: List[OwnerProfile] = Field(default_factory=list)
    total_subscribers: int = 0


class ChannelListOut(ApiModel):
    channels: List[OwnerProfile] = Field(default_factory=list)
    total_channels: int = 0


class LikedVideosOut(ApiModel):
    liked_videos: List[VideoOut] = Field(default_factory=list)
    total_liked_videos: int = 0


class PageOut(ApiModel, Generic[DataT]):
    paginated_results: List[DataT] = Field(default_factory=list)
    total_count: int = 0
    page: int = 1
    limit: int = 10
    total_pages: int = 0


class LoginOut(ApiModel):
    user: UserOut
    access_token: str
    refresh_token: str


class TokenPairOut(ApiModel):
    access_token: str
    refresh_token: str


def extend_model(model_cls, base: ApiModel, **extra: Any):
    """Build ``model_cls`` from an existing representation plus extra fields."""
    data = base.model_dump()
    data.update(extra)
    return model_cls.model_validate(data)


def video_with_likes(video: Any, total_likes: int) -> VideoWithLikesOut:
    return extend_model(VideoWithLikesOut, VideoOut.model_validate(video), total_likes=total_likes)


def video_with_owner(video: Any, owner: Optional[dict]) -> VideoWithOwnerOut:
    return extend_model(VideoWithOwnerOut, VideoOut.model_validate(video), owner=owner)


def page_out(page: Any, model_cls) -> PageOut:
    """Serialize a read-model page with ``model_cls`` for each result."""
    return PageOut(
        paginated_results=[model_cls.model_validate(item) for item in page.results],
        total_count=page.total_count,
        page=page.page,
        limit=page.limit,
        total_pages=page.total_pages,
    )


def channel_video(video: Any, total_likes: int, owner: Optional[dict]) -> ChannelVideoOut:
    return extend_model(ChannelVideoOut, VideoOut.model_validate(video), total_likes=total_likes, owner=owner)
