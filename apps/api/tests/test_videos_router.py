import pytest
from sqlalchemy.future import select

from models.comment import Comment
from models.like import Like
from models.playlist import PlaylistVideo
from models.video import Video
from models.watch_history import WatchHistoryEntry

API = "/api/v1/videos"
VIDEO_FILES = {
    "videoFile": ("clip.mp4", b"video bytes", "video/mp4"),
    "thumbnail": ("thumb.png", b"thumb bytes", "image/png"),
}


async def _publish(client, headers, title="Cooking pasta", description="A quick dinner"):
    response = await client.post(
        f"{API}/",
        data={"title": title, "description": description},
        files=VIDEO_FILES,
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()["data"]


@pytest.mark.asyncio
async def test_publish_uploads_both_assets(client, make_user, media_host):
    user, headers = await make_user("sam")

    video = await _publish(client, headers)

    assert video["owner"] == user.id
    assert video["videoFile"] == media_host.uploads[0][0]
    assert video["thumbnail"] == media_host.uploads[1][0]
    assert [kind for _, kind in media_host.uploads] == ["video", "image"]
    assert video["duration"] == 12.5
    assert video["views"] == 0
    assert video["isPublished"] is True


@pytest.mark.asyncio
async def test_publish_requires_files_and_metadata(client, make_user):
    _, headers = await make_user("sam")

    no_title = await client.post(f"{API}/", data={"description": "x"}, files=VIDEO_FILES, headers=headers)
    assert no_title.status_code == 400

    no_thumbnail = await client.post(
        f"{API}/",
        data={"title": "t", "description": "d"},
        files={"videoFile": VIDEO_FILES["videoFile"]},
        headers=headers,
    )
    assert no_thumbnail.status_code == 400
    assert no_thumbnail.json()["message"] == "Thumbnail is required"


@pytest.mark.asyncio
async def test_get_video_counts_views(client, make_user):
    _, owner_headers = await make_user("sam")
    _, viewer_headers = await make_user("alex")
    video = await _publish(client, owner_headers)

    await client.get(f"{API}/{video['_id']}", headers=viewer_headers)
    response = await client.get(f"{API}/{video['_id']}", headers=viewer_headers)

    assert response.status_code == 200
    assert response.json()["data"]["views"] == 2


@pytest.mark.asyncio
async def test_get_video_rejects_bad_and_unknown_ids(client, make_user):
    _, headers = await make_user("sam")

    bad = await client.get(f"{API}/not-an-id", headers=headers)
    assert bad.status_code == 400
    assert bad.json()["message"] == "Invalid video id"

    missing = await client.get(f"{API}/64b7f0c2a1b2c3d4e5f60718", headers=headers)
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_unpublished_video_is_visible_to_owner_only(client, make_user):
    _, owner_headers = await make_user("sam")
    _, viewer_headers = await make_user("alex")
    video = await _publish(client, owner_headers)

    toggled = await client.patch(f"{API}/toggle/publish/{video['_id']}", headers=owner_headers)
    assert toggled.status_code == 200
    assert toggled.json()["data"]["isPublished"] is False

    assert (await client.get(f"{API}/{video['_id']}", headers=viewer_headers)).status_code == 404
    assert (await client.get(f"{API}/{video['_id']}", headers=owner_headers)).status_code == 200


@pytest.mark.asyncio
async def test_listing_paginates_and_filters(client, make_user):
    owner, owner_headers = await make_user("sam")
    _, viewer_headers = await make_user("alex")
    for index in range(5):
        await _publish(client, owner_headers, title=f"Pasta night {index}", description="dinner")
    await _publish(client, owner_headers, title="Gardening", description="tomatoes")
    hidden = await _publish(client, owner_headers, title="Pasta draft", description="dinner")
    await client.patch(f"{API}/toggle/publish/{hidden['_id']}", headers=owner_headers)

    first = await client.get(f"{API}/", params={"query": "pasta", "limit": 2}, headers=viewer_headers)
    assert first.status_code == 200
    page = first.json()["data"]
    assert len(page["paginatedResults"]) == 2
    assert page["totalCount"] == 5
    assert page["totalPages"] == 3

    last = await client.get(f"{API}/", params={"query": "pasta", "limit": 2, "page": 3}, headers=viewer_headers)
    assert len(last.json()["data"]["paginatedResults"]) == 1
    assert last.json()["data"]["totalCount"] == 5

    own = await client.get(f"{API}/", params={"userId": owner.id, "query": "pasta"}, headers=owner_headers)
    assert own.json()["data"]["totalCount"] == 6

    by_title = await client.get(
        f"{API}/",
        params={"sortBy": "title", "sortType": "asc", "limit": 1},
        headers=viewer_headers,
    )
    assert by_title.json()["data"]["paginatedResults"][0]["title"] == "Gardening"


@pytest.mark.asyncio
async def test_listing_rejects_invalid_sort_and_page(client, make_user):
    _, headers = await make_user("sam")

    assert (await client.get(f"{API}/", params={"sortBy": "password"}, headers=headers)).status_code == 400
    assert (await client.get(f"{API}/", params={"sortType": "sideways"}, headers=headers)).status_code == 400
    assert (await client.get(f"{API}/", params={"page": 0}, headers=headers)).status_code == 400
    assert (await client.get(f"{API}/", params={"limit": "many"}, headers=headers)).status_code == 400


@pytest.mark.asyncio
async def test_update_video_replaces_thumbnail(client, make_user, media_host):
    _, owner_headers = await make_user("sam")
    _, other_headers = await make_user("alex")
    video = await _publish(client, owner_headers)

    forbidden = await client.patch(f"{API}/{video['_id']}", data={"title": "Mine"}, headers=other_headers)
    assert forbidden.status_code == 403

    empty = await client.patch(f"{API}/{video['_id']}", headers=owner_headers)
    assert empty.status_code == 400

    response = await client.patch(
        f"{API}/{video['_id']}",
        data={"title": "Better pasta"},
        files={"thumbnail": ("new.png", b"new thumb", "image/png")},
        headers=owner_headers,
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["title"] == "Better pasta"
    assert data["description"] == "A quick dinner"
    assert data["thumbnail"] == media_host.uploads[-1][0]
    assert media_host.deleted == [(video["thumbnail"], "image")]


@pytest.mark.asyncio
async def test_delete_video_removes_assets_and_dependents(client, make_user, media_host, session_maker):
    _, owner_headers = await make_user("sam")
    _, viewer_headers = await make_user("alex")
    video = await _publish(client, owner_headers)
    video_id = video["_id"]

    comment = await client.post(f"/api/v1/comments/{video_id}", json={"content": "yum"}, headers=viewer_headers)
    comment_id = comment.json()["data"]["_id"]
    await client.post(f"/api/v1/likes/toggle/c/{comment_id}", headers=owner_headers)
    await client.post(f"/api/v1/likes/toggle/v/{video_id}", headers=viewer_headers)
    playlist = await client.post("/api/v1/playlist/", json={"name": "Food", "description": "All food"}, headers=viewer_headers)
    await client.patch(f"/api/v1/playlist/add/{video_id}/{playlist.json()['data']['_id']}", headers=viewer_headers)
    await client.get(f"{API}/{video_id}", headers=viewer_headers)

    forbidden = await client.delete(f"{API}/{video_id}", headers=viewer_headers)
    assert forbidden.status_code == 403

    response = await client.delete(f"{API}/{video_id}", headers=owner_headers)

    assert response.status_code == 200
    assert response.json()["data"] == {}
    assert media_host.deleted == [(video["videoFile"], "video"), (video["thumbnail"], "image")]
    async with session_maker() as session:
        for model in (Video, Comment, Like, PlaylistVideo, WatchHistoryEntry):
            assert (await session.execute(select(model))).scalars().all() == []
