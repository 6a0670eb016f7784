"""ImgBB image hosting backend."""

import logging
from dataclasses import dataclass
from typing import ClassVar

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


@dataclass
class ImgbbBackend(HttpxBackend):
    """Uploads base64 images through the ImgBB API."""

    api_key: str = ""
    expiration_seconds: int | None = None
    upload_url: str = "https://api.imgbb.com/1/upload"

    name: ClassVar[str] = "imgbb"
    hosts: ClassVar[tuple[str, ...]] = ("ibb.co", "imgbb.com")

    async def upload(
        self, data: bytes, owner_entity_id: str, category: PhotoCategory
    ) -> UploadResult:
        """Upload an image as a base64 form field."""
        form = {
            "key": self.api_key,
            "image": encode_base64(data),
            "name": f"{owner_entity_id}_{category.value}_{timestamp_ms()}",
        }
        if self.expiration_seconds:
            form["expiration"] = str(self.expiration_seconds)
        try:
            response = await self.http_client.post(self.upload_url, data=form)
            payload = json_object(response)
        except (httpx.HTTPError, ValueError) as exc:
            return UploadResult.failure(self.name, str(exc))
        hosted = payload.get("data")
        url = hosted.get("url") if isinstance(hosted, dict) else None
        if response.is_error or not payload.get("success") or not url:
            return UploadResult.failure(self.name, error_message(payload))
        return UploadResult.success(self.name, url)

    async def delete(self, url: str) -> bool:
        """ImgBB has no delete API for API-key uploads; images expire."""
        _logger.info("ImgBB cannot delete %s, leaving it to expire", url)
        return True
