"""Transactional public mutations backed by Postgres functions.

PostgREST cannot span a transaction across several table calls, so each
mutation is a single stored function (see supabase/migrations). The
function performs the conditional quota increment first and returns a
status instead of raising, which keeps the reservation and the writes in
one transaction.
"""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from crop_gateway.adapters.supabase_region_repository import region_from_row
from crop_gateway.domain.regions import RegionDraft, RegionUpdate
from crop_gateway.domain.sessions import MutationResult, MutationStatus
from crop_gateway.services.regions import RegionMutationStore


@dataclass
class SupabaseRegionMutationStore(RegionMutationStore):
    """Calls the crop_* stored functions through Supabase RPC."""

    client: Client

    def apply_update(
        self,
        session_id: UUID,
        max_operations: int,
        update: RegionUpdate,
    ) -> MutationResult:
        """Reserve one operation and apply the update in one transaction."""
        params = {
            "p_session_id": str(session_id),
            "p_max_operations": max_operations,
            "p_region_id": str(update.region_id),
            "p_x": update.rectangle.x,
            "p_y": update.rectangle.y,
            "p_width": update.rectangle.width,
            "p_height": update.rectangle.height,
            "p_set_label": "label" in update.metadata,
            "p_label": update.metadata.get("label"),
            "p_set_title": "title" in update.metadata,
            "p_title": update.metadata.get("title"),
            "p_changed_by": update.changed_by,
            "p_requester_fingerprint": update.requester_fingerprint,
        }
        response = self.client.rpc("crop_apply_region_update", params).execute()
        return _result_from_payload(response.data)

    def create_public_region(
        self, session_id: UUID, max_operations: int, draft: RegionDraft
    ) -> MutationResult:
        """Reserve one operation and insert the suggestion in one transaction."""
        params = {
            "p_session_id": str(session_id),
            "p_max_operations": max_operations,
            "p_document_id": str(draft.document_id),
            "p_page_number": draft.page_number,
            "p_x": draft.rectangle.x,
            "p_y": draft.rectangle.y,
            "p_width": draft.rectangle.width,
            "p_height": draft.rectangle.height,
            "p_label": draft.label,
            "p_title": draft.title,
            "p_article_ref": draft.article_ref,
        }
        response = self.client.rpc("crop_create_public_region", params).execute()
        return _result_from_payload(response.data)


def _result_from_payload(data: object) -> MutationResult:
    payload = data[0] if isinstance(data, list) and data else data
    if not isinstance(payload, dict):
        raise RuntimeError("Region mutation returned an empty response")
    status = MutationStatus(str(payload.get("status")))
    region_row = payload.get("region")
    region = region_from_row(region_row) if isinstance(region_row, dict) else None
    if status is MutationStatus.OK and region is None:
        raise RuntimeError("Region mutation committed without returning the region")
    return MutationResult(
        status=status,
        update_count=int(payload.get("update_count") or 0),
        region=region,
    )
