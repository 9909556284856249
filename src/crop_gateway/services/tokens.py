"""Issuing crop session tokens."""

import hashlib
import logging
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from uuid import UUID

from crop_gateway.domain.errors import region_not_found
from crop_gateway.domain.sessions import Requester, SessionGrant
from crop_gateway.services.documents import DocumentService
from crop_gateway.services.regions import RegionRepository
from crop_gateway.services.sessions import CropSessionRepository

SESSION_TTL_SECONDS = 5 * 60
_SESSION_KEY_BYTES = 24
_USER_AGENT_MAX_LENGTH = 500

_logger = logging.getLogger(__name__)


def generate_session_key() -> str:
    """Return an opaque, URL-safe bearer key with 192 bits of entropy."""
    return secrets.token_urlsafe(_SESSION_KEY_BYTES)


def fingerprint_address(address: str | None) -> str:
    """Hash a client address so it can be compared without being stored."""
    digest = hashlib.sha256((address or "unknown").encode("utf-8")).hexdigest()
    return digest[:16]


def build_requester(address: str | None, user_agent: str | None) -> Requester:
    agent = user_agent[:_USER_AGENT_MAX_LENGTH] if user_agent else None
    return Requester(fingerprint=fingerprint_address(address), user_agent=agent)


@dataclass
class TokenIssuer:
    """Mints crop sessions scoped to a document and optionally one region."""

    session_repository: CropSessionRepository
    region_repository: RegionRepository
    document_service: DocumentService
    ttl_seconds: int = SESSION_TTL_SECONDS

    def issue(
        self,
        tenant_id: UUID,
        document_id: UUID,
        region_id: UUID | None,
        requester: Requester,
    ) -> SessionGrant:
        """Persist a fresh session and return what the client needs to use it."""
        document = self.document_service.get_for_tenant(document_id, tenant_id)
        if region_id is not None:
            region = self.region_repository.get_region(region_id)
            if region is None or region.document_id != document.id:
                raise region_not_found()

        expires_at = datetime.now(tz=UTC) + timedelta(seconds=self.ttl_seconds)
        session = self.session_repository.create_session(
            session_key=generate_session_key(),
            document_id=document.id,
            scoped_region_id=region_id,
            expires_at=expires_at,
            requester_fingerprint=requester.fingerprint,
            user_agent=requester.user_agent,
        )
        _logger.info(
            "Crop session %s issued for document %s (region=%s, requester=%s)",
            session.id,
            document.id,
            region_id,
            requester.fingerprint,
        )
        return SessionGrant(
            session_key=session.session_key,
            expires_at=session.expires_at,
            ttl_seconds=self.ttl_seconds,
            document_id=document.id,
            region_id=region_id,
        )
