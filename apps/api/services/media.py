"""
Media hosting client.

Incoming files are staged on local disk, pushed to Cloudinary through its
signed REST upload API and removed locally afterwards.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
import os
import time
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, AsyncIterator, Dict, Optional

import httpx
from fastapi import HTTPException, UploadFile

from config import require_cloudinary_credentials, settings
from services.errors import InternalError

logger = logging.getLogger(__name__)

CLOUDINARY_API_BASE = "https://api.cloudinary.com/v1_1"
UPLOAD_TIMEOUT_SECONDS = 300.0


@dataclass
class MediaAsset:
    url: str
    public_id: str
    resource_type: str = "image"
    duration: Optional[float] = None


def public_id_from_url(url: str) -> str:
    """Return the public id encoded in the last path segment of a media URL."""
    tail = (url or "").rstrip("/").rsplit("/", 1)[-1]
    return tail.split(".", 1)[0]


def _sanitize_filename(filename: str) -> str:
    base = os.path.basename(filename or "upload.bin")
    safe = "".join(ch if ch.isalnum() or ch in ("-", "_", ".") else "_" for ch in base)
    return safe or "upload.bin"


def _sign(params: Dict[str, Any], api_secret: str) -> str:
    payload = "&".join(f"{key}={params[key]}" for key in sorted(params))
    return hashlib.sha1(f"{payload}{api_secret}".encode()).hexdigest()


class MediaHost:
    """Interface of the external media host."""

    async def upload(self, path: Path, resource_type: str = "auto") -> MediaAsset:
        raise NotImplementedError

    async def delete(self, url: str, resource_type: str = "image") -> None:
        raise NotImplementedError


class CloudinaryMediaHost(MediaHost):
    """Cloudinary-backed media host using signed upload/destroy calls."""

    async def _post(self, resource_type: str, action: str, data: Dict[str, Any], files=None) -> Dict[str, Any]:
        cloud_name, api_key, api_secret = require_cloudinary_credentials()
        params = {**data, "timestamp": int(time.time())}
        signed = {**params, "api_key": api_key, "signature": _sign(params, api_secret)}
        url = f"{CLOUDINARY_API_BASE}/{cloud_name}/{resource_type}/{action}"
        async with httpx.AsyncClient(timeout=UPLOAD_TIMEOUT_SECONDS) as client:
            response = await client.post(url, data=signed, files=files)
            response.raise_for_status()
            return response.json()

    async def upload(self, path: Path, resource_type: str = "auto") -> MediaAsset:
        try:
            content = await asyncio.to_thread(Path(path).read_bytes)
            payload = await self._post(resource_type, "upload", {}, files={"file": (Path(path).name, content)})
        except (httpx.HTTPError, OSError, ValueError) as exc:
            logger.warning("Media upload failed for %s: %s", path, exc)
            raise InternalError("Error while uploading file to media host") from exc

        duration = payload.get("duration")
        return MediaAsset(
            url=payload.get("secure_url") or payload.get("url") or "",
            public_id=payload.get("public_id") or "",
            resource_type=payload.get("resource_type") or resource_type,
            duration=float(duration) if duration is not None else None,
        )

    async def delete(self, url: str, resource_type: str = "image") -> None:
        public_id = public_id_from_url(url)
        if not public_id:
            return
        try:
            await self._post(resource_type, "destroy", {"public_id": public_id})
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Media delete failed for %s: %s", url, exc)
            raise InternalError("Error while removing file from media host") from exc


_media_host = CloudinaryMediaHost()


def get_media_host() -> MediaHost:
    """FastAPI dependency returning the configured media host."""
    return _media_host


@asynccontextmanager
async def staged_upload(file: UploadFile) -> AsyncIterator[Path]:
    """Write an incoming upload to the staging directory and always clean it up."""
    staging_dir = Path(settings.MEDIA_UPLOAD_DIR)
    staging_dir.mkdir(parents=True, exist_ok=True)
    destination = staging_dir / f"{uuid.uuid4().hex}_{_sanitize_filename(file.filename)}"
    max_bytes = int(settings.MAX_MEDIA_UPLOAD_BYTES)

    total_size = 0
    try:
        with destination.open("wb") as out:
            while True:
                chunk = await file.read(1024 * 1024)
                if not chunk:
                    break
                total_size += len(chunk)
                if total_size > max_bytes:
                    raise HTTPException(
                        status_code=413,
                        detail=f"File too large. Max upload size is {max_bytes // (1024 * 1024)}MB.",
                    )
                out.write(chunk)
        await file.close()
        yield destination
    finally:
        destination.unlink(missing_ok=True)
