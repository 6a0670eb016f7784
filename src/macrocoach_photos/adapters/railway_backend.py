"""Self-hosted image server backend (Railway deployment)."""

import logging
from dataclasses import dataclass
from typing import ClassVar
from urllib.parse import urlparse

import httpx

from macrocoach_photos.adapters.http_backend import (
    HttpxBackend,
    error_message,
    json_object,
    timestamp_ms,
)
from macrocoach_photos.domain.photos import PhotoCategory, photo_file_name
from macrocoach_photos.domain.storage import UploadResult

_logger = logging.getLogger(__name__)


@dataclass
class RailwayBackend(HttpxBackend):
    """Multipart uploads to the app's own image server."""

    base_url: str = ""

    name: ClassVar[str] = "railway"

    async def upload(
        self, data: bytes, owner_entity_id: str, category: PhotoCategory
    ) -> UploadResult:
        """Upload an image as multipart form data."""
        file_name = photo_file_name(owner_entity_id, category, timestamp_ms())
        try:
            response = await self.http_client.post(
                f"{self._base()}/api/upload",
                files={"file": (file_name, data, "image/jpeg")},
                data={"clientId": owner_entity_id, "type": category.value},
            )
            payload = json_object(response)
        except (httpx.HTTPError, ValueError) as exc:
            return UploadResult.failure(self.name, str(exc))
        url = payload.get("url")
        if response.is_error or not payload.get("success") or not url:
            return UploadResult.failure(self.name, error_message(payload))
        return UploadResult.success(self.name, url)

    async def delete(self, url: str) -> bool:
        """Ask the server to remove the file behind a URL."""
        try:
            response = await self.http_client.request(
                "DELETE", f"{self._base()}/api/delete", json={"imageUrl": url}
            )
            response.raise_for_status()
            payload = json_object(response)
        except (httpx.HTTPError, ValueError) as exc:
            _logger.warning("Railway delete failed for %s: %s", url, exc)
            return False
        return bool(payload.get("success", True))

    def handles(self, url: str) -> bool:
        """Match URLs served from the configured server host."""
        host = urlparse(self.base_url).hostname
        return bool(host) and urlparse(url).hostname == host

    def _base(self) -> str:
        return self.base_url.rstrip("/")
