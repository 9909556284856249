"""Document lookups used to scope and bound public edits."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from crop_gateway.domain.documents import DocumentRecord, PageSize
from crop_gateway.domain.errors import document_not_found, invalid_page_number
from crop_gateway.services.cache import Cache


class DocumentRepository(Protocol):
    """Read-only access to documents and their page dimensions."""

    def get_document(self, document_id: UUID) -> DocumentRecord | None:
        """Return a document by id, if present."""

    def get_page_size(self, document_id: UUID, page_number: int) -> PageSize | None:
        """Return the recorded size of one page, if the page has its own size."""


@dataclass
class DocumentService:
    """Resolves documents for a tenant and the bounds of their pages."""

    repository: DocumentRepository
    cache: Cache
    ttl_seconds: int = 30

    def get_for_tenant(self, document_id: UUID, tenant_id: UUID) -> DocumentRecord:
        """Return the document, treating other tenants' documents as missing."""
        document = self.get(document_id)
        if document.tenant_id != tenant_id:
            raise document_not_found()
        return document

    def get(self, document_id: UUID) -> DocumentRecord:
        cache_key = f"document:{document_id}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, DocumentRecord):
            return cached
        document = self.repository.get_document(document_id)
        if document is None:
            raise document_not_found()
        self.cache.set(cache_key, document, ttl_seconds=self.ttl_seconds)
        return document

    def page_size(self, document: DocumentRecord, page_number: int) -> PageSize:
        """Return the bounds of a page, rejecting pages the document lacks."""
        if page_number < 1:
            raise invalid_page_number("pageNumber must be >= 1")
        if page_number > document.page_count:
            raise invalid_page_number(
                f"pageNumber {page_number} exceeds document pageCount "
                f"{document.page_count}"
            )
        cache_key = f"page:{document.id}:{page_number}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, PageSize):
            return cached
        size = (
            self.repository.get_page_size(document.id, page_number)
            or document.default_page_size
        )
        self.cache.set(cache_key, size, ttl_seconds=self.ttl_seconds)
        return size
