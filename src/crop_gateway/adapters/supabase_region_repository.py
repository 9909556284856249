"""Supabase-backed region repository."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from crop_gateway.domain.regions import RegionRecord, RegionSource
from crop_gateway.services.regions import RegionRepository


@dataclass
class SupabaseRegionRepository(RegionRepository):
    """Supabase implementation for region reads and review."""

    client: Client

    def get_region(self, region_id: UUID) -> RegionRecord | None:
        """Return a region by id, if present."""
        response = (
            self.client.table("epaper_regions")
            .select("*")
            .eq("id", str(region_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return region_from_row(response.data[0])

    def list_pending_regions(self, document_id: UUID) -> list[RegionRecord]:
        """Return inactive public suggestions in page order."""
        response = (
            self.client.table("epaper_regions")
            .select("*")
            .eq("document_id", str(document_id))
            .eq("source", RegionSource.PUBLIC.value)
            .eq("is_active", False)
            .order("page_number")
            .execute()
        )
        return [region_from_row(row) for row in response.data or []]

    def activate_region(self, region_id: UUID) -> RegionRecord | None:
        """Flag a region as active."""
        response = (
            self.client.table("epaper_regions")
            .update(
                {
                    "is_active": True,
                    "updated_by": "admin",
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                }
            )
            .eq("id", str(region_id))
            .execute()
        )
        if not response.data:
            return None
        return region_from_row(response.data[0])


def region_from_row(row: dict[str, object]) -> RegionRecord:
    """Map an epaper_regions row to a RegionRecord."""
    confidence = row.get("confidence")
    return RegionRecord(
        id=UUID(str(row["id"])),
        document_id=UUID(str(row["document_id"])),
        page_number=int(row["page_number"]),
        x=float(row["x"]),
        y=float(row["y"]),
        width=float(row["width"]),
        height=float(row["height"]),
        label=row.get("label"),
        title=row.get("title"),
        article_ref=row.get("article_ref"),
        source=RegionSource(str(row.get("source") or RegionSource.MANUAL.value)),
        is_active=bool(row.get("is_active")),
        confidence=float(confidence) if confidence is not None else None,
        created_by=str(row.get("created_by") or "editor"),
        updated_by=str(row.get("updated_by") or "editor"),
    )
