"""Cloudinary image hosting backend."""

import hashlib
import logging
import re
import time
from dataclasses import dataclass
from typing import ClassVar
from urllib.parse import urlparse

import httpx

from macrocoach_photos.adapters.http_backend import (
    HttpxBackend,
    encode_base64,
    error_message,
    json_object,
    timestamp_ms,
)
from macrocoach_photos.domain.photos import PhotoCategory
from macrocoach_photos.domain.storage import UploadResult

_logger = logging.getLogger(__name__)

_VERSION_SEGMENT = re.compile(r"^v\d+$")


@dataclass
class CloudinaryBackend(HttpxBackend):
    """Unsigned uploads and signed deletes against Cloudinary."""

    cloud_name: str = ""
    upload_preset: str = ""
    api_key: str | None = None
    api_secret: str | None = None
    api_base_url: str = "https://api.cloudinary.com/v1_1"

    name: ClassVar[str] = "cloudinary"
    hosts: ClassVar[tuple[str, ...]] = ("res.cloudinary.com",)

    async def upload(
        self, data: bytes, owner_entity_id: str, category: PhotoCategory
    ) -> UploadResult:
        """Upload an image as a data URL into a per-owner folder."""
        form = {
            "file": f"data:image/jpeg;base64,{encode_base64(data)}",
            "upload_preset": self.upload_preset,
            "folder": f"macrocoach/{owner_entity_id}",
            "public_id": f"{category.value}_{timestamp_ms()}",
        }
        try:
            response = await self.http_client.post(
                f"{self.api_base_url}/{self.cloud_name}/image/upload", data=form
            )
            payload = json_object(response)
        except (httpx.HTTPError, ValueError) as exc:
            return UploadResult.failure(self.name, str(exc))
        url = payload.get("secure_url")
        if response.is_error or not url:
            return UploadResult.failure(self.name, error_message(payload))
        return UploadResult.success(self.name, url)

    async def delete(self, url: str) -> bool:
        """Destroy an uploaded image with a signed request."""
        if not self.api_key or not self.api_secret:
            _logger.warning("Cloudinary delete skipped, no API credentials: %s", url)
            return False
        public_id = public_id_from_url(url)
        if not public_id:
            return False
        params = {"public_id": public_id, "timestamp": str(int(time.time()))}
        form = {
            **params,
            "api_key": self.api_key,
            "signature": sign_params(params, self.api_secret),
        }
        try:
            response = await self.http_client.post(
                f"{self.api_base_url}/{self.cloud_name}/image/destroy", data=form
            )
            response.raise_for_status()
            payload = json_object(response)
        except (httpx.HTTPError, ValueError) as exc:
            _logger.warning("Cloudinary delete failed for %s: %s", url, exc)
            return False
        return payload.get("result") in {"ok", "not found"}


def public_id_from_url(url: str) -> str | None:
    """Extract the public id (folder path without extension) from a delivery URL."""
    path = urlparse(url).path
    marker = "/upload/"
    if marker not in path:
        return None
    segments = path.split(marker, 1)[1].split("/")
    if segments and _VERSION_SEGMENT.match(segments[0]):
        segments = segments[1:]
    if not segments or not segments[-1]:
        return None
    segments[-1] = segments[-1].rsplit(".", 1)[0]
    return "/".join(segments)


def sign_params(params: dict[str, str], api_secret: str) -> str:
    """Compute Cloudinary's SHA-1 request signature."""
    to_sign = "&".join(f"{key}={params[key]}" for key in sorted(params))
    return hashlib.sha1(f"{to_sign}{api_secret}".encode()).hexdigest()  # noqa: S324
