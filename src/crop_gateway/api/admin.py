"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, status

if TYPE_CHECKING:
    from crop_gateway.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


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


@router.get(
    "/documents/{document_id}/pending-regions",
    dependencies=[Depends(require_admin)],
)
async def pending_regions(document_id: UUID, request: Request) -> dict[str, object]:
    """Return public suggestions waiting for review."""
    container: AppContainer = request.app.state.container
    return {"regions": container.admin_service.list_pending_regions(document_id)}


@router.post("/regions/{region_id}/activate", dependencies=[Depends(require_admin)])
async def activate_region(region_id: UUID, request: Request) -> dict[str, object]:
    """Publish a reviewed region."""
    container: AppContainer = request.app.state.container
    return {"region": container.admin_service.activate_region(region_id)}


@router.get("/regions/{region_id}/history", dependencies=[Depends(require_admin)])
async def region_history(
    region_id: UUID, request: Request, limit: int = Query(default=50, ge=1, le=500)
) -> dict[str, object]:
    """Return geometry history for a region, newest first."""
    container: AppContainer = request.app.state.container
    return {"history": container.admin_service.region_history(region_id, limit)}


@router.post("/crop-sessions/sweep", dependencies=[Depends(require_admin)])
async def sweep_crop_sessions(request: Request) -> dict[str, int]:
    """Delete expired crop sessions now."""
    container: AppContainer = request.app.state.container
    return {"deleted": container.admin_service.sweep_sessions()}
