"""Crop session authorization and quota settlement."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from crop_gateway.domain.errors import (
    credential_expired,
    credential_required,
    invalid_credential,
    quota_exhausted,
    region_not_found,
    scope_mismatch,
    scoped_session_cannot_create,
    tenant_mismatch,
)
from crop_gateway.domain.sessions import (
    CropSessionRecord,
    MutationResult,
    MutationStatus,
    Requester,
)

MAX_OPERATIONS = 3

_logger = logging.getLogger(__name__)


class CropSessionRepository(Protocol):
    """Persistence interface for crop sessions."""

    def create_session(  # noqa: PLR0913
        self,
        session_key: str,
        document_id: UUID,
        scoped_region_id: UUID | None,
        expires_at: datetime,
        requester_fingerprint: str | None,
        user_agent: str | None,
    ) -> CropSessionRecord:
        """Create a session with a zero update count and return it."""

    def get_by_key(self, session_key: str) -> CropSessionRecord | None:
        """Return a session by its key, joined with the document tenant."""

    def delete_expired(self, before: datetime) -> int:
        """Delete sessions that expired before the cutoff and return the count."""


@dataclass
class SessionAuthorizer:
    """Gates every public mutation on a crop session.

    The checks here run against a snapshot of the session and give each
    failure its own signal. They do not consume quota: the reservation is a
    conditional increment executed by the store inside the mutation
    transaction, and `settle` turns its outcome into the same signals.
    """

    repository: CropSessionRepository
    max_operations: int = MAX_OPERATIONS

    def authorize(
        self,
        session_key: str | None,
        tenant_id: UUID,
        region_id: UUID | None = None,
        requester: Requester | None = None,
    ) -> CropSessionRecord:
        """Return the session if it may mutate the given region."""
        session = self._check(session_key, tenant_id, requester)
        if session.scoped_region_id is not None and session.scoped_region_id != region_id:
            raise scope_mismatch()
        return session

    def authorize_create(
        self,
        session_key: str | None,
        tenant_id: UUID,
        requester: Requester | None = None,
    ) -> CropSessionRecord:
        """Return the session if it may create a new region."""
        session = self._check(session_key, tenant_id, requester)
        if session.scoped_region_id is not None:
            raise scoped_session_cannot_create()
        return session

    def settle(self, session: CropSessionRecord, result: MutationResult) -> int:
        """Translate a reservation outcome and return the updates remaining."""
        if result.status is MutationStatus.OK:
            return max(self.max_operations - result.update_count, 0)
        if result.status is MutationStatus.QUOTA_EXHAUSTED:
            _logger.info(
                "Crop session %s lost the race for its last operation", session.id
            )
            raise quota_exhausted(self.max_operations, result.update_count)
        if result.status is MutationStatus.EXPIRED:
            raise credential_expired()
        if result.status is MutationStatus.SESSION_MISSING:
            raise invalid_credential()
        raise region_not_found()

    def _check(
        self,
        session_key: str | None,
        tenant_id: UUID,
        requester: Requester | None,
    ) -> CropSessionRecord:
        key = (session_key or "").strip()
        if not key:
            raise credential_required()
        session = self.repository.get_by_key(key)
        if session is None:
            raise invalid_credential()
        if session.tenant_id != tenant_id:
            _logger.warning(
                "Crop session tenant mismatch: session=%s document=%s "
                "session_tenant=%s request_tenant=%s",
                session.id,
                session.document_id,
                session.tenant_id,
                tenant_id,
            )
            raise tenant_mismatch()
        if datetime.now(tz=UTC) > session.expires_at:
            raise credential_expired()
        if session.update_count >= self.max_operations:
            _logger.info(
                "Crop session %s exhausted (%s/%s)",
                session.id,
                session.update_count,
                self.max_operations,
            )
            raise quota_exhausted(self.max_operations, session.update_count)
        if (
            requester is not None
            and session.requester_fingerprint
            and session.requester_fingerprint != requester.fingerprint
        ):
            _logger.warning(
                "Requester fingerprint changed for crop session %s: expected %s, got %s",
                session.id,
                session.requester_fingerprint,
                requester.fingerprint,
            )
        return session
