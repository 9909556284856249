"""Supabase-backed crop session repository."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from crop_gateway.domain.sessions import CropSessionRecord
from crop_gateway.services.sessions import CropSessionRepository

_SESSION_COLUMNS = (
    "id, session_key, document_id, scoped_region_id, expires_at, update_count, "
    "requester_fingerprint, user_agent, epaper_documents(tenant_id)"
)


@dataclass
class SupabaseCropSessionRepository(CropSessionRepository):
    """Supabase implementation for crop sessions."""

    client: Client

    def create_session(  # noqa: PLR0913
        self,
        session_key: str,
        document_id: UUID,
        scoped_region_id: UUID | None,
        expires_at: datetime,
        requester_fingerprint: str | None,
        user_agent: str | None,
    ) -> CropSessionRecord:
        """Insert a session row and return it."""
        self.client.table("crop_sessions").insert(
            {
                "session_key": session_key,
                "document_id": str(document_id),
                "scoped_region_id": str(scoped_region_id) if scoped_region_id else None,
                "expires_at": expires_at.isoformat(),
                "update_count": 0,
                "requester_fingerprint": requester_fingerprint,
                "user_agent": user_agent,
            }
        ).execute()
        session = self.get_by_key(session_key)
        if session is None:
            raise RuntimeError("Failed to create crop session")
        return session

    def get_by_key(self, session_key: str) -> CropSessionRecord | None:
        """Return a session by key together with its document tenant."""
        response = (
            self.client.table("crop_sessions")
            .select(_SESSION_COLUMNS)
            .eq("session_key", session_key)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _session_from_row(response.data[0])

    def delete_expired(self, before: datetime) -> int:
        """Delete sessions that expired before the cutoff."""
        response = (
            self.client.table("crop_sessions")
            .delete()
            .lt("expires_at", before.isoformat())
            .execute()
        )
        return len(response.data or [])


def _session_from_row(row: dict[str, object]) -> CropSessionRecord:
    document = row.get("epaper_documents") or {}
    if isinstance(document, list):
        document = document[0] if document else {}
    scoped = row.get("scoped_region_id")
    return CropSessionRecord(
        id=UUID(str(row["id"])),
        session_key=str(row["session_key"]),
        document_id=UUID(str(row["document_id"])),
        tenant_id=UUID(str(document["tenant_id"])),
        scoped_region_id=UUID(str(scoped)) if scoped else None,
        expires_at=datetime.fromisoformat(str(row["expires_at"])),
        update_count=int(row.get("update_count") or 0),
        requester_fingerprint=row.get("requester_fingerprint"),
        user_agent=row.get("user_agent"),
    )
