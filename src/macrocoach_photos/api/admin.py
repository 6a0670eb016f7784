"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, status

if TYPE_CHECKING:
    from macrocoach_photos.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])

# Intents younger than this may still be awaiting their ledger write.
MIN_GRACE_SECONDS = 60


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.post("/reconcile", dependencies=[Depends(require_admin)])
async def reconcile(
    request: Request,
    grace_seconds: int | None = Query(default=None, ge=MIN_GRACE_SECONDS),
) -> dict[str, int]:
    """Sweep orphaned remote uploads that never reached the ledger."""
    container: AppContainer = request.app.state.container
    grace = timedelta(seconds=grace_seconds) if grace_seconds is not None else None
    report = await container.reconciliation_service.sweep_orphans(grace)
    return {
        "checked": report.checked,
        "cleared": report.cleared,
        "deleted": report.deleted,
        "failed": report.failed,
    }


@router.post("/purge-cache", dependencies=[Depends(require_admin)])
async def purge_cache(request: Request, max_age_days: int = 30) -> dict[str, int]:
    """Remove locally cached photos older than the given age."""
    container: AppContainer = request.app.state.container
    removed = await container.upload_service.cache.purge_older_than(
        timedelta(days=max_age_days)
    )
    return {"removed": removed}
