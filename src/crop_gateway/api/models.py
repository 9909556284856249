"""Pydantic models for public crop-session requests."""

from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class CropSessionRequest(BaseModel):
    """Body of POST /crop-session."""

    document_id: UUID = Field(alias="documentId")
    region_id: UUID | None = Field(default=None, alias="regionId")


class RegionUpdateRequest(BaseModel):
    """Body of PUT /regions/{regionId}/update; omitted fields keep their value."""

    model_config = ConfigDict(allow_inf_nan=False)

    x: float | None = None
    y: float | None = None
    width: float | None = None
    height: float | None = None
    label: str | None = Field(
        default=None, validation_alias=AliasChoices("label", "column")
    )
    title: str | None = None


class RegionCreateRequest(BaseModel):
    """Body of POST /regions/create."""

    model_config = ConfigDict(allow_inf_nan=False, populate_by_name=True)

    page_number: int = Field(alias="pageNumber")
    x: float
    y: float
    width: float
    height: float
    label: str | None = None
    title: str | None = None
    article_ref: str | None = Field(default=None, alias="articleRef")
