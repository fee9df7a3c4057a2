from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import Field

from scrapbook_api.schemas.common import CamelModel, HttpUrlString
from scrapbook_api.schemas.element import ElementResponse, ElementSpec


class PageCreate(CamelModel):
    page_order: int = Field(..., strict=True, ge=0)
    background_color: str | None = Field(None, max_length=50)
    background_image_url: HttpUrlString | None = None


class PagePatch(CamelModel):
    """Page-level properties of a layout update. Only fields the caller sent are applied."""

    background_color: str | None = Field(None, max_length=50)
    background_image_url: HttpUrlString | None = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class PageLayoutUpdate(PagePatch):
    """Body of PUT /pages/{page_id}.

    ``elements`` absent (or null) leaves the element set alone; an empty list
    deletes every element on the page.
    """

    elements: list[ElementSpec] | None = None

    def page_patch(self) -> PagePatch:
        return PagePatch.model_validate(
            self.model_dump(include={"background_color", "background_image_url"}, exclude_unset=True)
        )


class PageResponse(CamelModel):
    id: UUID
    scrapbook_id: UUID
    page_order: int
    background_color: str | None
    background_image_url: str | None
    created_at: datetime
    updated_at: datetime


class PageDetail(PageResponse):
    elements: list[ElementResponse] = Field(default_factory=list)


class PageCreatedResponse(CamelModel):
    page: PageResponse
