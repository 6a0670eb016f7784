"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse

from macrocoach_photos.api.admin import router as admin_router
from macrocoach_photos.api.models import (
    PhotoReferenceResponse,
    PhotoSummary,
    PhotoUploadRequest,
    PhotoUploadResponse,
)
from macrocoach_photos.app_logging import configure_logging
from macrocoach_photos.containers import AppContainer
from macrocoach_photos.domain.photos import PhotoCategory
from macrocoach_photos.errors import PhotoUploadError
from macrocoach_photos.services.compression import detect_mime_type


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level, container.settings.log_format)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)

    @app.exception_handler(PhotoUploadError)
    async def upload_error_handler(
        request: Request, exc: PhotoUploadError
    ) -> JSONResponse:
        logger.warning("Upload failed: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"error": exc.kind, "detail": str(exc), "retryable": True},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/photos", status_code=status.HTTP_201_CREATED)
    async def upload_photo(
        payload: PhotoUploadRequest, request: Request
    ) -> PhotoUploadResponse:
        """Store a base64-encoded photo and return its identity."""
        state_container: AppContainer = request.app.state.container
        try:
            image_bytes = payload.image_bytes()
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        identity = await state_container.upload_service.upload_photo(
            image_bytes,
            payload.owner_entity_id,
            payload.category,
            notes=payload.notes,
            capture_date=payload.capture_date,
        )
        return PhotoUploadResponse(identity=identity)

    @app.get("/photos/{identity}")
    async def get_photo(identity: str, request: Request) -> PhotoReferenceResponse:
        """Resolve the best available reference for a photo."""
        state_container: AppContainer = request.app.state.container
        reference = await state_container.retrieval_service.get_photo(identity)
        if reference is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return PhotoReferenceResponse(identity=identity, reference=reference)

    @app.get("/photos/{identity}/content")
    async def get_photo_content(identity: str, request: Request) -> Response:
        """Return the photo bytes from the cheapest available copy."""
        state_container: AppContainer = request.app.state.container
        data = await state_container.retrieval_service.load_photo_bytes(identity)
        if data is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return Response(content=data, media_type=detect_mime_type(data))

    @app.post("/photos/{identity}/replicate")
    async def replicate_photo(identity: str, request: Request) -> dict[str, object]:
        """Retry remote replication for a photo stored only on this device."""
        state_container: AppContainer = request.app.state.container
        record = await state_container.upload_service.replicate_photo(identity)
        return {
            "identity": identity,
            "remote_url": record.remote_url if record else None,
        }

    @app.delete("/photos/{identity}")
    async def delete_photo(identity: str, request: Request) -> dict[str, bool]:
        """Delete a single photo from every tier."""
        state_container: AppContainer = request.app.state.container
        deleted = await state_container.cleanup_service.delete_photo(identity)
        if not deleted:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return {"deleted": True}

    @app.get("/clients/{owner_entity_id}/photos")
    async def list_client_photos(
        owner_entity_id: str,
        request: Request,
        category: PhotoCategory | None = None,
    ) -> dict[str, list[PhotoSummary]]:
        """List a client's photos, newest first, with display references."""
        state_container: AppContainer = request.app.state.container
        photos = await state_container.retrieval_service.list_client_photos(
            owner_entity_id, category
        )
        return {"photos": [PhotoSummary.from_resolved(photo) for photo in photos]}

    @app.delete("/clients/{owner_entity_id}/photos")
    async def delete_client_photos(
        owner_entity_id: str, request: Request
    ) -> dict[str, int]:
        """Cascade hook called when the owning client is deleted."""
        state_container: AppContainer = request.app.state.container
        deleted = await state_container.cleanup_service.delete_owner_photos(
            owner_entity_id
        )
        return {"deleted": deleted}

    return app
