"""Tweet router."""

from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from database import get_db
from models.like import Like
from models.tweet import Tweet
from models.user import User
from routers.auth_scope import AuthContext, ensure_object_id, ensure_owner, get_auth_context
from routers.schemas import ApiModel, ApiResponse, TweetOut
from services.errors import NotFound, require_fields

router = APIRouter()


class TweetRequest(ApiModel):
    content: Optional[str] = None


async def _load_tweet(db: AsyncSession, tweet_id: str) -> Tweet:
    ensure_object_id(tweet_id, "tweet")
    tweet = await db.get(Tweet, tweet_id)
    if not tweet:
        raise NotFound("Tweet not found")
    return tweet


@router.post("/", response_model=ApiResponse[TweetOut], status_code=201)
async def create_tweet(
    payload: TweetRequest,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    require_fields(content=payload.content)
    tweet = Tweet(content=payload.content.strip(), owner_id=auth.user_id)
    db.add(tweet)
    await db.commit()
    return ApiResponse.ok(TweetOut.model_validate(tweet), "Tweet created successfully", status_code=201)


@router.get("/user/{user_id}", response_model=ApiResponse[List[TweetOut]])
async def get_user_tweets(
    user_id: str,
    _auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    ensure_object_id(user_id, "user")
    if not await db.get(User, user_id):
        raise NotFound("User not found")

    result = await db.execute(
        select(Tweet).where(Tweet.owner_id == user_id).order_by(Tweet.created_at.desc(), Tweet.id.desc())
    )
    tweets = [TweetOut.model_validate(tweet) for tweet in result.scalars().all()]
    return ApiResponse.ok(tweets, "Tweets fetched successfully")


@router.patch("/{tweet_id}", response_model=ApiResponse[TweetOut])
async def update_tweet(
    tweet_id: str,
    payload: TweetRequest,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    tweet = await _load_tweet(db, tweet_id)
    ensure_owner(auth, tweet.owner_id)
    require_fields(content=payload.content)

    tweet.content = payload.content.strip()
    await db.commit()
    return ApiResponse.ok(TweetOut.model_validate(tweet), "Tweet updated successfully")


@router.delete("/{tweet_id}", response_model=ApiResponse[dict])
async def delete_tweet(
    tweet_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    tweet = await _load_tweet(db, tweet_id)
    ensure_owner(auth, tweet.owner_id)

    await db.execute(delete(Like).where(Like.tweet_id == tweet.id))
    await db.execute(delete(Tweet).where(Tweet.id == tweet.id))
    await db.commit()
    return ApiResponse.ok({}, "Tweet deleted successfully")
