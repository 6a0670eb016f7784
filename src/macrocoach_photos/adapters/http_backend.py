"""Shared httpx plumbing for remote image backends."""

import base64
import time
from dataclasses import dataclass
from typing import Any, ClassVar
from urllib.parse import urlparse

import httpx

from macrocoach_photos.services.backends import BackendAdapter


@dataclass
class HttpxBackend(BackendAdapter):
    """Base for backends that talk to an image host through httpx."""

    http_client: httpx.AsyncClient

    name: ClassVar[str] = "http"
    hosts: ClassVar[tuple[str, ...]] = ()

    async def fetch(self, url: str) -> bytes:
        """Download hosted image bytes with a plain GET."""
        response = await self.http_client.get(url)
        response.raise_for_status()
        return response.content

    def handles(self, url: str) -> bool:
        """Return True if the URL points at one of this backend's hosts."""
        host = urlparse(url).hostname or ""
        return any(host == known or host.endswith(f".{known}") for known in self.hosts)


def encode_base64(data: bytes) -> str:
    """Return bytes as a plain base64 string."""
    return base64.b64encode(data).decode("ascii")


def timestamp_ms() -> int:
    """Return the current wall-clock time in milliseconds."""
    return time.time_ns() // 1_000_000


def json_object(response: httpx.Response) -> dict[str, Any]:
    """Decode a JSON response body that must be an object."""
    payload = response.json()
    if not isinstance(payload, dict):
        raise ValueError(f"Expected a JSON object, got {type(payload).__name__}")
    return payload


def error_message(payload: object, default: str = "Upload failed") -> str:
    """Pull a human-readable error out of a backend JSON payload."""
    if not isinstance(payload, dict):
        return default
    error = payload.get("error")
    if isinstance(error, dict):
        message = error.get("message")
        if message:
            return str(message)
    if isinstance(error, str) and error:
        return error
    message = payload.get("message")
    return str(message) if message else default
