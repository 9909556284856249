"""Domain models for published documents."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class PageSize:
    """Width and height of one page in document-coordinate units."""

    width: float
    height: float


@dataclass(frozen=True)
class DocumentRecord:
    """A paginated document owned by a tenant."""

    id: UUID
    tenant_id: UUID
    page_count: int
    page_width: float
    page_height: float

    @property
    def default_page_size(self) -> PageSize:
        return PageSize(width=self.page_width, height=self.page_height)
