"""GitHub repository contents used as an image host."""

import logging
from dataclasses import dataclass
from typing import ClassVar
from urllib.parse import unquote, urlparse

import httpx

from macrocoach_photos.adapters.http_backend import (
    HttpxBackend,
    encode_base64,
    error_message,
    json_object,
    timestamp_ms,
)
from macrocoach_photos.domain.photos import PhotoCategory, photo_file_name
from macrocoach_photos.domain.storage import UploadResult

_logger = logging.getLogger(__name__)


@dataclass
class GitHubBackend(HttpxBackend):
    """Commits images into a repository via the contents API."""

    token: str = ""
    repo_owner: str = ""
    repo_name: str = ""
    branch: str = "main"
    folder: str = "images"
    api_base_url: str = "https://api.github.com"

    name: ClassVar[str] = "github"
    hosts: ClassVar[tuple[str, ...]] = ("raw.githubusercontent.com",)

    async def upload(
        self, data: bytes, owner_entity_id: str, category: PhotoCategory
    ) -> UploadResult:
        """Create a new file in the repository and return its raw URL."""
        file_name = photo_file_name(owner_entity_id, category, timestamp_ms())
        body = {
            "message": f"Upload image for client {owner_entity_id}",
            "content": encode_base64(data),
            "branch": self.branch,
        }
        try:
            response = await self.http_client.put(
                self._contents_url(f"{self.folder}/{file_name}"),
                json=body,
                headers=self._headers(),
            )
            payload = json_object(response)
        except (httpx.HTTPError, ValueError) as exc:
            return UploadResult.failure(self.name, str(exc))
        content = payload.get("content")
        url = content.get("download_url") if isinstance(content, dict) else None
        if response.is_error or not url:
            return UploadResult.failure(self.name, error_message(payload))
        return UploadResult.success(self.name, url)

    async def delete(self, url: str) -> bool:
        """Delete the file behind a raw URL, looking up its blob sha first."""
        file_path = f"{self.folder}/{unquote(urlparse(url).path.rsplit('/', 1)[-1])}"
        contents_url = self._contents_url(file_path)
        try:
            lookup = await self.http_client.get(
                contents_url, params={"ref": self.branch}, headers=self._headers()
            )
            if lookup.status_code == httpx.codes.NOT_FOUND:
                return True
            lookup.raise_for_status()
            sha = json_object(lookup).get("sha")
            if not sha:
                return True
            response = await self.http_client.request(
                "DELETE",
                contents_url,
                json={
                    "message": f"Delete image {file_path}",
                    "sha": sha,
                    "branch": self.branch,
                },
                headers=self._headers(),
            )
        except (httpx.HTTPError, ValueError) as exc:
            _logger.warning("GitHub delete failed for %s: %s", url, exc)
            return False
        return response.is_success

    def handles(self, url: str) -> bool:
        """Match raw URLs that belong to the configured repository."""
        prefix = f"/{self.repo_owner}/{self.repo_name}/"
        return super().handles(url) and urlparse(url).path.startswith(prefix)

    def _contents_url(self, path: str) -> str:
        return (
            f"{self.api_base_url}/repos/{self.repo_owner}/{self.repo_name}"
            f"/contents/{path}"
        )

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
        }
