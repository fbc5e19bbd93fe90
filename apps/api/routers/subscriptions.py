"""Channel subscription router."""

import logging
from typing import Any, Dict, Union

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from models.subscription import Subscription
from models.user import User
from routers.auth_scope import AuthContext, ensure_object_id, get_auth_context
from routers.schemas import ApiResponse, ChannelListOut, SubscriberListOut, SubscriptionOut
from services import read_models
from services.errors import BadRequest, NotFound
from services.toggles import toggle_relation

router = APIRouter()
logger = logging.getLogger(__name__)


async def _ensure_user_exists(db: AsyncSession, user_id: str, label: str) -> None:
    ensure_object_id(user_id, label)
    if not await db.get(User, user_id):
        raise NotFound(f"{label.capitalize()} not found")


@router.post("/c/{channel_id}", response_model=ApiResponse[Union[SubscriptionOut, Dict[str, Any]]])
async def toggle_subscription(
    channel_id: str,
    response: Response,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Subscribe to a channel, or unsubscribe when already subscribed."""
    await _ensure_user_exists(db, channel_id, "channel")
    if channel_id == auth.user_id:
        raise BadRequest("You cannot subscribe to your own channel")

    result = await toggle_relation(db, Subscription, subscriber_id=auth.user_id, channel_id=channel_id)
    if result.removed:
        logger.info("unsubscribed subscriber=%s channel=%s", auth.user_id, channel_id)
        response.status_code = 200
        return ApiResponse.ok({}, "Unsubscribed successfully")

    logger.info("subscribed subscriber=%s channel=%s", auth.user_id, channel_id)
    response.status_code = 201
    return ApiResponse.ok(SubscriptionOut.model_validate(result.created), "Subscribed successfully", status_code=201)


@router.get("/c/{channel_id}", response_model=ApiResponse[SubscriberListOut])
async def get_channel_subscribers(
    channel_id: str,
    _auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    await _ensure_user_exists(db, channel_id, "channel")
    subscribers = await read_models.channel_subscribers(db, channel_id)
    return ApiResponse.ok(SubscriberListOut.model_validate(subscribers), "Subscribers fetched successfully")


@router.get("/u/{subscriber_id}", response_model=ApiResponse[ChannelListOut])
async def get_subscribed_channels(
    subscriber_id: str,
    _auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    await _ensure_user_exists(db, subscriber_id, "subscriber")
    channels = await read_models.subscribed_channels(db, subscriber_id)
    return ApiResponse.ok(ChannelListOut.model_validate(channels), "Subscribed channels fetched successfully")
