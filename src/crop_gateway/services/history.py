"""Append-only history of region geometry changes."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from crop_gateway.domain.history import HistoryRecord
from crop_gateway.domain.regions import PUBLIC_ACTOR


class HistoryRepository(Protocol):
    """Read access to stored history rows.

    Rows are only ever written by the mutation store, inside the same
    transaction as the region change they describe. The store compares the
    locked row with the new rectangle, so the previous geometry is never a
    stale read.
    """

    def list_for_region(self, region_id: UUID, limit: int) -> list[HistoryRecord]:
        """Return history rows for a region, newest first."""


@dataclass
class HistoryLedger:
    """Actor tag stamped on public history rows, plus audit reads."""

    repository: HistoryRepository
    changed_by: str = PUBLIC_ACTOR

    def list_region_history(
        self, region_id: UUID, limit: int = 50
    ) -> list[HistoryRecord]:
        return self.repository.list_for_region(region_id, limit)
