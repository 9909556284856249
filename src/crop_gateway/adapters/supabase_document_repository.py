"""Supabase-backed document lookups."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from crop_gateway.domain.documents import DocumentRecord, PageSize
from crop_gateway.services.documents import DocumentRepository


@dataclass
class SupabaseDocumentRepository(DocumentRepository):
    """Supabase implementation for documents and page sizes."""

    client: Client

    def get_document(self, document_id: UUID) -> DocumentRecord | None:
        """Return a document by id, if present."""
        response = (
            self.client.table("epaper_documents")
            .select("id, tenant_id, page_count, page_width, page_height")
            .eq("id", str(document_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return DocumentRecord(
            id=UUID(row["id"]),
            tenant_id=UUID(row["tenant_id"]),
            page_count=int(row.get("page_count") or 0),
            page_width=float(row["page_width"]),
            page_height=float(row["page_height"]),
        )

    def get_page_size(self, document_id: UUID, page_number: int) -> PageSize | None:
        """Return the size recorded for one page, if any."""
        response = (
            self.client.table("epaper_pages")
            .select("width, height")
            .eq("document_id", str(document_id))
            .eq("page_number", page_number)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return PageSize(width=float(row["width"]), height=float(row["height"]))
