"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

import httpx
from supabase import create_client

from macrocoach_photos.adapters.cloudinary_backend import CloudinaryBackend
from macrocoach_photos.adapters.file_device_identity import FileDeviceIdentityProvider
from macrocoach_photos.adapters.filesystem_cache_store import FilesystemCacheStore
from macrocoach_photos.adapters.filesystem_upload_journal import (
    FilesystemUploadJournal,
)
from macrocoach_photos.adapters.github_backend import GitHubBackend
from macrocoach_photos.adapters.imgbb_backend import ImgbbBackend
from macrocoach_photos.adapters.railway_backend import RailwayBackend
from macrocoach_photos.adapters.supabase_photo_ledger import SupabasePhotoLedger
from macrocoach_photos.config import Settings, parse_backend_order
from macrocoach_photos.services.backends import BackendAdapter
from macrocoach_photos.services.cleanup import PhotoCleanupService
from macrocoach_photos.services.compression import CompressionService
from macrocoach_photos.services.reconciliation import ReconciliationService
from macrocoach_photos.services.retrieval import PhotoRetrievalService
from macrocoach_photos.services.uploads import PhotoUploadService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    upload_service: PhotoUploadService
    retrieval_service: PhotoRetrievalService
    cleanup_service: PhotoCleanupService
    reconciliation_service: ReconciliationService
    close_resources: Callable[[], Awaitable[None]]


def build_backends(
    settings: Settings, http_client: httpx.AsyncClient
) -> list[BackendAdapter]:
    """Build the ordered backend chain from configured credentials."""
    available: dict[str, BackendAdapter] = {}
    if settings.railway_base_url:
        available["railway"] = RailwayBackend(
            http_client=http_client, base_url=settings.railway_base_url
        )
    if settings.imgbb_api_key:
        available["imgbb"] = ImgbbBackend(
            http_client=http_client,
            api_key=settings.imgbb_api_key,
            expiration_seconds=settings.imgbb_expiration_seconds,
        )
    if settings.cloudinary_cloud_name and settings.cloudinary_upload_preset:
        available["cloudinary"] = CloudinaryBackend(
            http_client=http_client,
            cloud_name=settings.cloudinary_cloud_name,
            upload_preset=settings.cloudinary_upload_preset,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
        )
    if (
        settings.github_token
        and settings.github_repo_owner
        and settings.github_repo_name
    ):
        available["github"] = GitHubBackend(
            http_client=http_client,
            token=settings.github_token,
            repo_owner=settings.github_repo_owner,
            repo_name=settings.github_repo_name,
            branch=settings.github_branch,
        )
    return [
        available[name]
        for name in parse_backend_order(settings.photo_backends)
        if name in available
    ]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    ledger = SupabasePhotoLedger(
        supabase_client, table_name=resolved_settings.photo_ledger_table
    )
    cache_dir = Path(resolved_settings.photo_cache_dir)
    cache = FilesystemCacheStore(cache_dir)
    journal = FilesystemUploadJournal(cache_dir / ".pending")
    device_identity = FileDeviceIdentityProvider(
        Path(resolved_settings.device_id_path)
    )
    http_client = httpx.AsyncClient(timeout=resolved_settings.backend_timeout_seconds)
    backends = build_backends(resolved_settings, http_client)

    upload_service = PhotoUploadService(
        compression=CompressionService(),
        cache=cache,
        backends=backends,
        ledger=ledger,
        device_identity=device_identity,
        journal=journal,
        backend_timeout_seconds=resolved_settings.backend_timeout_seconds,
    )
    retrieval_service = PhotoRetrievalService(
        ledger=ledger,
        cache=cache,
        device_identity=device_identity,
        backends=backends,
    )
    cleanup_service = PhotoCleanupService(
        ledger=ledger,
        cache=cache,
        device_identity=device_identity,
        backends=backends,
    )
    reconciliation_service = ReconciliationService(
        journal=journal,
        ledger=ledger,
        backends=backends,
        grace_period=timedelta(seconds=resolved_settings.orphan_grace_seconds),
    )

    async def close_resources() -> None:
        await http_client.aclose()

    return AppContainer(
        settings=resolved_settings,
        upload_service=upload_service,
        retrieval_service=retrieval_service,
        cleanup_service=cleanup_service,
        reconciliation_service=reconciliation_service,
        close_resources=close_resources,
    )
