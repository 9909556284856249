"""Review and audit operations for privileged tooling."""

from dataclasses import dataclass
from uuid import UUID

from crop_gateway.domain.errors import region_not_found
from crop_gateway.services.history import HistoryLedger
from crop_gateway.services.regions import RegionRepository
from crop_gateway.services.sweeper import CropSessionSweeper


@dataclass
class AdminService:
    """Service behind the admin router."""

    region_repository: RegionRepository
    history_ledger: HistoryLedger
    sweeper: CropSessionSweeper

    def list_pending_regions(self, document_id: UUID) -> list[dict[str, object]]:
        """Return public suggestions waiting for review."""
        regions = self.region_repository.list_pending_regions(document_id)
        return [region.to_dict() for region in regions]

    def activate_region(self, region_id: UUID) -> dict[str, object]:
        """Make a region visible to readers."""
        region = self.region_repository.activate_region(region_id)
        if region is None:
            raise region_not_found()
        return region.to_dict()

    def region_history(self, region_id: UUID, limit: int = 50) -> list[dict[str, object]]:
        records = self.history_ledger.list_region_history(region_id, limit)
        return [record.to_dict() for record in records]

    def sweep_sessions(self) -> int:
        return self.sweeper.sweep()
