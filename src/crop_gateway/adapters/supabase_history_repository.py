"""Supabase repository for region history reads."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from crop_gateway.domain.history import HistoryEntry, HistoryRecord
from crop_gateway.domain.regions import Rectangle
from crop_gateway.services.history import HistoryRepository


@dataclass
class SupabaseHistoryRepository(HistoryRepository):
    """Supabase-backed history reads."""

    client: Client

    def list_for_region(self, region_id: UUID, limit: int) -> list[HistoryRecord]:
        """Return history rows for a region, newest first."""
        response = (
            self.client.table("region_history")
            .select("*")
            .eq("region_id", str(region_id))
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_record_from_row(row) for row in response.data or []]


def _record_from_row(row: dict[str, object]) -> HistoryRecord:
    session_id = row.get("crop_session_id")
    return HistoryRecord(
        id=UUID(str(row["id"])),
        entry=HistoryEntry(
            region_id=UUID(str(row["region_id"])),
            previous=Rectangle(
                x=float(row["previous_x"]),
                y=float(row["previous_y"]),
                width=float(row["previous_width"]),
                height=float(row["previous_height"]),
            ),
            new=Rectangle(
                x=float(row["new_x"]),
                y=float(row["new_y"]),
                width=float(row["new_width"]),
                height=float(row["new_height"]),
            ),
            changed_by=str(row["changed_by"]),
            session_id=UUID(str(session_id)) if session_id else None,
            requester_fingerprint=row.get("requester_fingerprint"),
        ),
        created_at=datetime.fromisoformat(str(row["created_at"])),
    )
