"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from macrocoach_photos.app_logging import DEFAULT_LOG_FORMAT

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

KNOWN_BACKENDS = ("railway", "imgbb", "cloudinary", "github")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    admin_token: str
    photo_ledger_table: str = "photo_metadata"
    photo_cache_dir: str = ".macrocoach/photos"
    device_id_path: str = ".macrocoach/device_id"
    photo_backends: str = ",".join(KNOWN_BACKENDS)
    backend_timeout_seconds: float = 20.0
    orphan_grace_seconds: int = 3600
    imgbb_api_key: str | None = None
    imgbb_expiration_seconds: int | None = None
    cloudinary_cloud_name: str | None = None
    cloudinary_upload_preset: str | None = None
    cloudinary_api_key: str | None = None
    cloudinary_api_secret: str | None = None
    github_token: str | None = None
    github_repo_owner: str | None = None
    github_repo_name: str | None = None
    github_branch: str = "main"
    railway_base_url: str | None = None
    log_level: str = "INFO"
    log_format: str = DEFAULT_LOG_FORMAT
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_backend_order(raw: str | None) -> list[str]:
    """Parse the ordered backend chain from env, dropping unknown names."""
    if raw is None:
        return list(KNOWN_BACKENDS)
    order: list[str] = []
    for chunk in raw.split(","):
        name = chunk.strip().lower()
        if name in KNOWN_BACKENDS and name not in order:
            order.append(name)
    return order
