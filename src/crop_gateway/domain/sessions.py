"""Domain models for crop sessions."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID

from crop_gateway.domain.regions import RegionRecord


@dataclass(frozen=True)
class Requester:
    """Audit-only details about the caller; never used to block."""

    fingerprint: str
    user_agent: str | None = None


@dataclass(frozen=True)
class CropSessionRecord:
    """A persisted crop session joined with its document's tenant."""

    id: UUID
    session_key: str
    document_id: UUID
    tenant_id: UUID
    scoped_region_id: UUID | None
    expires_at: datetime
    update_count: int
    requester_fingerprint: str | None
    user_agent: str | None


@dataclass(frozen=True)
class SessionGrant:
    """What the issuer hands back to the client."""

    session_key: str
    expires_at: datetime
    ttl_seconds: int
    document_id: UUID
    region_id: UUID | None


class MutationStatus(StrEnum):
    """Outcome of an atomic reservation plus mutation."""

    OK = "ok"
    QUOTA_EXHAUSTED = "quota_exhausted"
    EXPIRED = "expired"
    SESSION_MISSING = "session_missing"
    REGION_MISSING = "region_missing"


@dataclass(frozen=True)
class MutationResult:
    """What the store reports after running a mutation transaction."""

    status: MutationStatus
    update_count: int
    region: RegionRecord | None = None


@dataclass(frozen=True)
class MutationOutcome:
    """A committed mutation together with the quota left on the session."""

    region: RegionRecord
    updates_remaining: int
    pending_review: bool = False
