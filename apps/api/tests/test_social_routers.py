import pytest
from sqlalchemy.future import select

from models.like import Like
from models.video import Video


async def _video(session_maker, owner_id, title="clip"):
    async with session_maker() as session:
        video = Video(
            owner_id=owner_id,
            video_file=f"https://media.test/video/{title}.mp4",
            thumbnail=f"https://media.test/image/{title}.png",
            title=title,
            description="description",
        )
        session.add(video)
        await session.commit()
    return video


@pytest.mark.asyncio
async def test_comment_lifecycle(client, make_user, session_maker):
    owner, owner_headers = await make_user("sam")
    _, other_headers = await make_user("alex")
    video = await _video(session_maker, owner.id)

    blank = await client.post(f"/api/v1/comments/{video.id}", json={"content": "  "}, headers=owner_headers)
    assert blank.status_code == 400

    created = []
    for index in range(3):
        response = await client.post(
            f"/api/v1/comments/{video.id}",
            json={"content": f"comment {index}"},
            headers=owner_headers,
        )
        assert response.status_code == 201
        created.append(response.json()["data"])
    assert created[0]["video"] == video.id
    assert created[0]["owner"] == owner.id

    listed = await client.get(f"/api/v1/comments/{video.id}", params={"limit": 2}, headers=other_headers)
    assert listed.status_code == 200
    page = listed.json()["data"]
    assert page["totalCount"] == 3
    assert len(page["paginatedResults"]) == 2

    comment_id = created[0]["_id"]
    forbidden = await client.patch(f"/api/v1/comments/c/{comment_id}", json={"content": "hijack"}, headers=other_headers)
    assert forbidden.status_code == 403

    edited = await client.patch(f"/api/v1/comments/c/{comment_id}", json={"content": "edited"}, headers=owner_headers)
    assert edited.json()["data"]["content"] == "edited"

    await client.post(f"/api/v1/likes/toggle/c/{comment_id}", headers=other_headers)
    deleted = await client.delete(f"/api/v1/comments/c/{comment_id}", headers=owner_headers)
    assert deleted.status_code == 200
    async with session_maker() as session:
        assert (await session.execute(select(Like))).scalars().all() == []

    remaining = await client.get(f"/api/v1/comments/{video.id}", headers=owner_headers)
    assert remaining.json()["data"]["totalCount"] == 2


@pytest.mark.asyncio
async def test_comment_on_missing_video(client, make_user):
    _, headers = await make_user("sam")

    response = await client.post(
        "/api/v1/comments/64b7f0c2a1b2c3d4e5f60718",
        json={"content": "hello"},
        headers=headers,
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_tweet_lifecycle(client, make_user):
    owner, owner_headers = await make_user("sam")
    _, other_headers = await make_user("alex")

    created = await client.post("/api/v1/tweets/", json={"content": "first tweet"}, headers=owner_headers)
    assert created.status_code == 201
    tweet = created.json()["data"]
    assert tweet["owner"] == owner.id

    listed = await client.get(f"/api/v1/tweets/user/{owner.id}", headers=other_headers)
    assert [item["content"] for item in listed.json()["data"]] == ["first tweet"]

    forbidden = await client.patch(f"/api/v1/tweets/{tweet['_id']}", json={"content": "x"}, headers=other_headers)
    assert forbidden.status_code == 403

    updated = await client.patch(f"/api/v1/tweets/{tweet['_id']}", json={"content": "edited"}, headers=owner_headers)
    assert updated.json()["data"]["content"] == "edited"

    deleted = await client.delete(f"/api/v1/tweets/{tweet['_id']}", headers=owner_headers)
    assert deleted.status_code == 200
    listed = await client.get(f"/api/v1/tweets/user/{owner.id}", headers=owner_headers)
    assert listed.json()["data"] == []


@pytest.mark.asyncio
async def test_playlist_keeps_set_semantics_and_order(client, make_user, session_maker):
    owner, owner_headers = await make_user("sam")
    _, other_headers = await make_user("alex")
    first = await _video(session_maker, owner.id, "first")
    second = await _video(session_maker, owner.id, "second")

    created = await client.post(
        "/api/v1/playlist/",
        json={"name": "Mix", "description": "Weekend mix"},
        headers=owner_headers,
    )
    assert created.status_code == 201
    playlist_id = created.json()["data"]["_id"]

    for video in (second, first, second):
        response = await client.patch(f"/api/v1/playlist/add/{video.id}/{playlist_id}", headers=owner_headers)
        assert response.status_code == 200
    assert response.json()["data"]["videos"] == [second.id, first.id]

    forbidden = await client.patch(f"/api/v1/playlist/add/{first.id}/{playlist_id}", headers=other_headers)
    assert forbidden.status_code == 403

    removed = await client.patch(f"/api/v1/playlist/remove/{second.id}/{playlist_id}", headers=owner_headers)
    assert removed.json()["data"]["videos"] == [first.id]

    renamed = await client.patch(f"/api/v1/playlist/{playlist_id}", json={"name": "Chill"}, headers=owner_headers)
    assert renamed.json()["data"]["name"] == "Chill"
    assert renamed.json()["data"]["description"] == "Weekend mix"

    fetched = await client.get(f"/api/v1/playlist/{playlist_id}", headers=other_headers)
    assert fetched.json()["data"]["videos"] == [first.id]

    listed = await client.get(f"/api/v1/playlist/user/{owner.id}", headers=other_headers)
    assert [item["_id"] for item in listed.json()["data"]] == [playlist_id]

    deleted = await client.delete(f"/api/v1/playlist/{playlist_id}", headers=owner_headers)
    assert deleted.status_code == 200
    assert (await client.get(f"/api/v1/playlist/{playlist_id}", headers=owner_headers)).status_code == 404


@pytest.mark.asyncio
async def test_playlist_requires_name_and_description(client, make_user):
    _, headers = await make_user("sam")

    response = await client.post("/api/v1/playlist/", json={"name": "Mix"}, headers=headers)

    assert response.status_code == 400
    assert response.json()["errors"] == [{"field": "description"}]


@pytest.mark.asyncio
async def test_subscription_toggle_and_listings(client, make_user):
    channel, channel_headers = await make_user("sam")
    fan, fan_headers = await make_user("alex")

    subscribed = await client.post(f"/api/v1/subscriptions/c/{channel.id}", headers=fan_headers)
    assert subscribed.status_code == 201
    assert subscribed.json()["data"]["subscriber"] == fan.id
    assert subscribed.json()["data"]["channel"] == channel.id

    subscribers = await client.get(f"/api/v1/subscriptions/c/{channel.id}", headers=channel_headers)
    data = subscribers.json()["data"]
    assert data["totalSubscribers"] == 1
    assert data["subscribers"][0]["_id"] == fan.id
    assert set(data["subscribers"][0]) == {"_id", "fullName", "userName", "avatar"}

    channels = await client.get(f"/api/v1/subscriptions/u/{fan.id}", headers=fan_headers)
    assert channels.json()["data"]["totalChannels"] == 1
    assert channels.json()["data"]["channels"][0]["userName"] == "sam"

    unsubscribed = await client.post(f"/api/v1/subscriptions/c/{channel.id}", headers=fan_headers)
    assert unsubscribed.status_code == 200
    assert unsubscribed.json()["data"] == {}
    subscribers = await client.get(f"/api/v1/subscriptions/c/{channel.id}", headers=channel_headers)
    assert subscribers.json()["data"] == {"subscribers": [], "totalSubscribers": 0}


@pytest.mark.asyncio
async def test_cannot_subscribe_to_own_or_missing_channel(client, make_user):
    channel, headers = await make_user("sam")

    own = await client.post(f"/api/v1/subscriptions/c/{channel.id}", headers=headers)
    assert own.status_code == 400

    missing = await client.post("/api/v1/subscriptions/c/64b7f0c2a1b2c3d4e5f60718", headers=headers)
    assert missing.status_code == 404
