"""Public crop-session endpoints for anonymous readers."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Header, Request, status

from crop_gateway.api.models import (
    CropSessionRequest,
    RegionCreateRequest,
    RegionUpdateRequest,
)
from crop_gateway.domain.regions import Rectangle
from crop_gateway.services.tokens import build_requester

if TYPE_CHECKING:
    from crop_gateway.containers import AppContainer
    from crop_gateway.domain.sessions import Requester

router = APIRouter(tags=["crop-session"])


@router.post("/crop-session", status_code=status.HTTP_201_CREATED)
async def create_crop_session(
    body: CropSessionRequest, request: Request
) -> dict[str, object]:
    """Issue a short-lived session for editing regions of one document."""
    container: AppContainer = request.app.state.container
    tenant_id = _resolve_tenant(request)
    grant = container.token_issuer.issue(
        tenant_id=tenant_id,
        document_id=body.document_id,
        region_id=body.region_id,
        requester=_requester(request),
    )
    return {
        "sessionKey": grant.session_key,
        "expiresAt": grant.expires_at.isoformat(),
        "ttlSeconds": grant.ttl_seconds,
        "documentId": str(grant.document_id),
        "regionId": str(grant.region_id) if grant.region_id else None,
    }


@router.put("/regions/{region_id}/update")
async def update_region(
    region_id: UUID,
    body: RegionUpdateRequest,
    request: Request,
    x_crop_session: str | None = Header(default=None),
) -> dict[str, object]:
    """Adjust an existing region's rectangle or metadata."""
    container: AppContainer = request.app.state.container
    tenant_id = _resolve_tenant(request)
    requester = _requester(request)
    session = container.session_authorizer.authorize(
        x_crop_session, tenant_id, region_id=region_id, requester=requester
    )
    outcome = container.region_mutator.update_region(
        session,
        region_id,
        body.model_dump(exclude_unset=True),
        requester=requester,
    )
    return {
        "region": outcome.region.to_dict(),
        "updatesRemaining": outcome.updates_remaining,
    }


@router.post("/regions/create", status_code=status.HTTP_201_CREATED)
async def create_region(
    body: RegionCreateRequest,
    request: Request,
    x_crop_session: str | None = Header(default=None),
) -> dict[str, object]:
    """Suggest a new region; it stays hidden until reviewed."""
    container: AppContainer = request.app.state.container
    tenant_id = _resolve_tenant(request)
    session = container.session_authorizer.authorize_create(
        x_crop_session, tenant_id, requester=_requester(request)
    )
    outcome = container.region_mutator.create_region(
        session,
        page_number=body.page_number,
        rectangle=Rectangle(x=body.x, y=body.y, width=body.width, height=body.height),
        label=body.label,
        title=body.title,
        article_ref=body.article_ref,
    )
    return {
        "region": outcome.region.to_dict(),
        "pendingReview": outcome.pending_review,
        "updatesRemaining": outcome.updates_remaining,
    }


def _resolve_tenant(request: Request) -> UUID:
    container: AppContainer = request.app.state.container
    headers = request.headers
    raw_domain = (
        headers.get(container.settings.tenant_header)
        or headers.get("x-forwarded-host")
        or headers.get("host")
    )
    return container.tenant_service.resolve(raw_domain)


def _requester(request: Request) -> Requester:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        address = forwarded.split(",", 1)[0].strip()
    else:
        address = request.client.host if request.client else None
    return build_requester(address, request.headers.get("user-agent"))
