"""Models package."""

from .user import User
from .video import Video
from .comment import Comment
from .tweet import Tweet
from .like import Like
from .playlist import Playlist, PlaylistVideo
from .subscription import Subscription
from .watch_history import WatchHistoryEntry
