from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import ConfigDict, Field, ValidationInfo, field_validator

from scrapbook_api.schemas.common import CamelModel

ElementType = Literal["photo", "sticker", "text"]


# =============================================================================
# Per-type property schemas
# =============================================================================


class _ElementProperties(CamelModel):
    # Unknown keys are kept in the stored bag as submitted
    model_config = ConfigDict(extra="allow")


class PhotoProperties(_ElementProperties):
    image_url: str = Field(..., min_length=1)
    caption: str | None = None
    filter: str | None = None


class StickerProperties(_ElementProperties):
    sticker_id: str = Field(..., min_length=1)


class TextProperties(_ElementProperties):
    content: str
    font: str | None = None
    font_size: float | None = Field(None, gt=0)
    color: str | None = None


PROPERTY_SCHEMAS: dict[str, type[_ElementProperties]] = {
    "photo": PhotoProperties,
    "sticker": StickerProperties,
    "text": TextProperties,
}


# =============================================================================
# Element requests / responses
# =============================================================================


class ElementSpec(CamelModel):
    """One element of a page layout, as submitted by the editor."""

    type: ElementType
    x_pos: float = Field(..., strict=True, allow_inf_nan=False)
    y_pos: float = Field(..., strict=True, allow_inf_nan=False)
    rotation: float = Field(0.0, strict=True, allow_inf_nan=False)
    scale: float = Field(1.0, strict=True, gt=0, allow_inf_nan=False)
    z_index: int = Field(..., strict=True)
    properties: dict[str, Any]

    @field_validator("properties")
    @classmethod
    def validate_properties(cls, value: dict[str, Any], info: ValidationInfo) -> dict[str, Any]:
        element_type = info.data.get("type")
        # An invalid type is already reported on its own field
        if element_type in PROPERTY_SCHEMAS:
            PROPERTY_SCHEMAS[element_type].model_validate(value)
        return value

    def to_columns(self) -> dict[str, Any]:
        """Column values for a PageElement row."""
        return {
            "type": self.type,
            "x_pos": self.x_pos,
            "y_pos": self.y_pos,
            "rotation": self.rotation,
            "scale": self.scale,
            "z_index": self.z_index,
            "properties": dict(self.properties),
        }


class ElementResponse(CamelModel):
    id: UUID
    page_id: UUID
    type: ElementType
    x_pos: float
    y_pos: float
    rotation: float
    scale: float
    z_index: int
    properties: dict[str, Any]
    created_at: datetime


class ElementCreatedResponse(CamelModel):
    element: ElementResponse
