"""Domain models for the region history ledger."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from crop_gateway.domain.regions import Rectangle


@dataclass(frozen=True)
class HistoryEntry:
    """A geometry change to append inside a mutation transaction."""

    region_id: UUID
    previous: Rectangle
    new: Rectangle
    changed_by: str
    session_id: UUID | None
    requester_fingerprint: str | None


@dataclass(frozen=True)
class HistoryRecord:
    """A stored, immutable history row."""

    id: UUID
    entry: HistoryEntry
    created_at: datetime

    def to_dict(self) -> dict[str, object]:
        entry = self.entry
        return {
            "id": str(self.id),
            "regionId": str(entry.region_id),
            "previousX": entry.previous.x,
            "previousY": entry.previous.y,
            "previousWidth": entry.previous.width,
            "previousHeight": entry.previous.height,
            "newX": entry.new.x,
            "newY": entry.new.y,
            "newWidth": entry.new.width,
            "newHeight": entry.new.height,
            "changedBy": entry.changed_by,
            "sessionId": str(entry.session_id) if entry.session_id else None,
            "requesterFingerprint": entry.requester_fingerprint,
            "createdAt": self.created_at.isoformat(),
        }
