"""Public region mutations: geometry updates and new suggestions."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from crop_gateway.domain.errors import region_document_mismatch, region_not_found
from crop_gateway.domain.regions import (
    Rectangle,
    RegionDraft,
    RegionRecord,
    RegionUpdate,
)
from crop_gateway.domain.sessions import (
    CropSessionRecord,
    MutationOutcome,
    MutationResult,
    Requester,
)
from crop_gateway.services.documents import DocumentService
from crop_gateway.services.geometry import validate_rectangle
from crop_gateway.services.history import HistoryLedger
from crop_gateway.services.sessions import SessionAuthorizer

_METADATA_FIELDS = ("label", "title")

_logger = logging.getLogger(__name__)


class RegionRepository(Protocol):
    """Persistence interface for regions outside of public mutations."""

    def get_region(self, region_id: UUID) -> RegionRecord | None:
        """Return a region by id, if present."""

    def list_pending_regions(self, document_id: UUID) -> list[RegionRecord]:
        """Return inactive public suggestions for a document."""

    def activate_region(self, region_id: UUID) -> RegionRecord | None:
        """Mark a region active and return it, if present."""


class RegionMutationStore(Protocol):
    """Runs each public mutation as one transaction.

    Every method first reserves one operation on the session with a
    conditional increment (`update_count < max_operations` and not expired)
    and only then writes. When the reservation fails nothing is written and
    the status says why. History is decided against the locked row: a row is
    appended, stamped with the update's actor and requester fingerprint,
    only when the stored rectangle differs from the new one.
    """

    def apply_update(
        self,
        session_id: UUID,
        max_operations: int,
        update: RegionUpdate,
    ) -> MutationResult:
        """Reserve, append history, update the region, drop cached assets."""

    def create_public_region(
        self, session_id: UUID, max_operations: int, draft: RegionDraft
    ) -> MutationResult:
        """Reserve and insert an inactive public region."""


@dataclass
class RegionMutator:
    """Applies validated public changes to regions."""

    region_repository: RegionRepository
    mutation_store: RegionMutationStore
    document_service: DocumentService
    authorizer: SessionAuthorizer
    history_ledger: HistoryLedger

    def update_region(
        self,
        session: CropSessionRecord,
        region_id: UUID,
        changes: dict[str, object],
        requester: Requester | None = None,
    ) -> MutationOutcome:
        """Merge changes onto a region and commit them atomically."""
        region = self.region_repository.get_region(region_id)
        if region is None:
            raise region_not_found()
        if region.document_id != session.document_id:
            raise region_document_mismatch()

        document = self.document_service.get(session.document_id)
        page = self.document_service.page_size(document, region.page_number)
        rectangle = validate_rectangle(region.rectangle.merged(changes), page)
        update = RegionUpdate(
            region_id=region.id,
            rectangle=rectangle,
            changed_by=self.history_ledger.changed_by,
            requester_fingerprint=requester.fingerprint if requester else None,
            metadata=_metadata_changes(changes),
        )

        result = self.mutation_store.apply_update(
            session.id, self.authorizer.max_operations, update
        )
        remaining = self.authorizer.settle(session, result)
        return MutationOutcome(
            region=_committed_region(result), updates_remaining=remaining
        )

    def create_region(  # noqa: PLR0913
        self,
        session: CropSessionRecord,
        page_number: int,
        rectangle: Rectangle,
        label: str | None = None,
        title: str | None = None,
        article_ref: str | None = None,
    ) -> MutationOutcome:
        """Store a new public suggestion that stays hidden until reviewed."""
        document = self.document_service.get(session.document_id)
        page = self.document_service.page_size(document, page_number)
        validate_rectangle(rectangle, page)
        draft = RegionDraft(
            document_id=document.id,
            page_number=page_number,
            rectangle=rectangle,
            label=_clean(label),
            title=_clean(title),
            article_ref=_clean(article_ref),
        )

        result = self.mutation_store.create_public_region(
            session.id, self.authorizer.max_operations, draft
        )
        remaining = self.authorizer.settle(session, result)
        region = _committed_region(result)
        _logger.info(
            "Public region suggestion %s created on document %s page %s",
            region.id,
            document.id,
            page_number,
        )
        return MutationOutcome(
            region=region, updates_remaining=remaining, pending_review=True
        )


def _metadata_changes(changes: dict[str, object]) -> dict[str, str | None]:
    """Pick provided metadata fields; empty values clear the field."""
    return {
        name: _clean(changes[name]) for name in _METADATA_FIELDS if name in changes
    }


def _clean(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _committed_region(result: MutationResult) -> RegionRecord:
    if result.region is None:
        raise RuntimeError("Region mutation committed without returning the region")
    return result.region
