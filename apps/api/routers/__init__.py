"""Routers package."""

from . import (
    health,
    users,
    videos,
    comments,
    likes,
    tweets,
    playlists,
    subscriptions,
    dashboard,
)
