"""Domain models for regions (clips) tagged to document pages."""

from dataclasses import dataclass, field
from enum import StrEnum
from uuid import UUID

PUBLIC_ACTOR = "public"


class RegionSource(StrEnum):
    """Provenance of a region."""

    MANUAL = "manual"
    AUTOMATIC = "automatic"
    PUBLIC = "public"


@dataclass(frozen=True)
class Rectangle:
    """Axis-aligned rectangle in document-coordinate units."""

    x: float
    y: float
    width: float
    height: float

    def merged(self, changes: dict[str, object]) -> "Rectangle":
        """Return a copy where provided axes replace the current ones."""
        values = {}
        for axis in ("x", "y", "width", "height"):
            value = changes.get(axis)
            values[axis] = float(value) if value is not None else getattr(self, axis)
        return Rectangle(**values)


@dataclass(frozen=True)
class RegionRecord:
    """A persisted region."""

    id: UUID
    document_id: UUID
    page_number: int
    x: float
    y: float
    width: float
    height: float
    label: str | None
    title: str | None
    article_ref: str | None
    source: RegionSource
    is_active: bool
    confidence: float | None
    created_by: str
    updated_by: str

    @property
    def rectangle(self) -> Rectangle:
        return Rectangle(x=self.x, y=self.y, width=self.width, height=self.height)

    def to_dict(self) -> dict[str, object]:
        """Serialize for JSON responses."""
        return {
            "id": str(self.id),
            "documentId": str(self.document_id),
            "pageNumber": self.page_number,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "label": self.label,
            "title": self.title,
            "articleRef": self.article_ref,
            "source": str(self.source),
            "isActive": self.is_active,
            "confidence": self.confidence,
            "createdBy": self.created_by,
            "updatedBy": self.updated_by,
        }


@dataclass(frozen=True)
class RegionUpdate:
    """A validated change to apply to an existing region."""

    region_id: UUID
    rectangle: Rectangle
    changed_by: str
    requester_fingerprint: str | None = None
    metadata: dict[str, str | None] = field(default_factory=dict)


@dataclass(frozen=True)
class RegionDraft:
    """A validated public suggestion waiting to be stored."""

    document_id: UUID
    page_number: int
    rectangle: Rectangle
    label: str | None = None
    title: str | None = None
    article_ref: str | None = None
