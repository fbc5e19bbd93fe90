import hashlib
import io
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import HTTPException
from starlette.datastructures import UploadFile

from config import settings
from services import media, notifications
from services.errors import InternalError


@pytest.mark.asyncio
async def test_healthcheck_envelope(client):
    response = await client.get("/api/v1/healthcheck")

    assert response.status_code == 200
    assert response.json() == {"statusCode": 200, "data": {}, "message": "Ok", "success": True}


@pytest.mark.asyncio
async def test_liveness(client):
    response = await client.get("/api/v1/health/live")

    assert response.json() == {"alive": True}


def test_public_id_is_taken_from_last_url_segment():
    url = "https://res.cloudinary.com/demo/image/upload/v1712/abc123.png"
    assert media.public_id_from_url(url) == "abc123"
    assert media.public_id_from_url("") == ""


def test_signature_uses_sorted_params_and_secret():
    signature = media._sign({"timestamp": 100, "public_id": "abc"}, "shh")

    assert signature == hashlib.sha1(b"public_id=abc&timestamp=100shh").hexdigest()


@pytest.mark.asyncio
async def test_cloudinary_upload_maps_response(monkeypatch, tmp_path):
    source = tmp_path / "clip.mp4"
    source.write_bytes(b"video")
    post = AsyncMock(
        return_value={
            "secure_url": "https://res.cloudinary.com/demo/video/upload/clip1.mp4",
            "public_id": "clip1",
            "resource_type": "video",
            "duration": "31.4",
        }
    )
    monkeypatch.setattr(media.CloudinaryMediaHost, "_post", post)

    asset = await media.CloudinaryMediaHost().upload(source, resource_type="video")

    assert asset.url.endswith("clip1.mp4")
    assert asset.duration == pytest.approx(31.4)
    assert post.await_args.args[:2] == ("video", "upload")


@pytest.mark.asyncio
async def test_cloudinary_without_credentials_fails_as_internal_error(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "CLOUDINARY_CLOUD_NAME", "")
    source = tmp_path / "a.png"
    source.write_bytes(b"png")

    with pytest.raises(InternalError):
        await media.CloudinaryMediaHost().upload(source)
    with pytest.raises(InternalError):
        await media.CloudinaryMediaHost().delete("https://res.cloudinary.com/demo/image/upload/a.png")


@pytest.mark.asyncio
async def test_staged_upload_cleans_up_and_enforces_size(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "MAX_MEDIA_UPLOAD_BYTES", 4)
    staging = tmp_path / "uploads"

    small = UploadFile(file=io.BytesIO(b"abc"), filename="../../etc/a b.png")
    async with media.staged_upload(small) as path:
        assert path.parent == staging
        assert path.read_bytes() == b"abc"
        assert path.name.endswith("a_b.png")
    assert not path.exists()

    large = UploadFile(file=io.BytesIO(b"too large"), filename="big.png")
    with pytest.raises(HTTPException) as exc_info:
        async with media.staged_upload(large):
            pass
    assert exc_info.value.status_code == 413
    assert list(staging.iterdir()) == []


@pytest.mark.asyncio
async def test_welcome_email_is_skipped_without_mail_host(monkeypatch):
    deliver = MagicMock()
    monkeypatch.setattr(notifications, "_deliver", deliver)

    await notifications.send_welcome_email("sam@x.com")

    deliver.assert_not_called()


@pytest.mark.asyncio
async def test_welcome_email_message(monkeypatch):
    sent = []
    monkeypatch.setattr(settings, "MAIL_HOST", "smtp.example.com")
    monkeypatch.setattr(notifications, "_deliver", sent.append)

    await notifications.send_welcome_email("sam@x.com")

    assert sent[0]["To"] == "sam@x.com"
    assert sent[0]["Subject"] == notifications.WELCOME_SUBJECT


@pytest.mark.asyncio
async def test_readiness_requires_media_host_credentials(client, monkeypatch):
    not_ready = await client.get("/api/v1/health/ready")
    assert not_ready.status_code == 503

    monkeypatch.setattr(settings, "CLOUDINARY_CLOUD_NAME", "demo")
    monkeypatch.setattr(settings, "CLOUDINARY_API_KEY", "key")
    monkeypatch.setattr(settings, "CLOUDINARY_API_SECRET", "secret")
    ready = await client.get("/api/v1/health/ready")
    assert ready.json() == {"ready": True}
