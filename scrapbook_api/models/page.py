import uuid
from typing import Any

from sqlalchemy import Float, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from scrapbook_api.models.base import Base, JSONType, TimestampMixin, UUIDMixin


class Page(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "pages"

    scrapbook_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("scrapbooks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Caller-supplied; neither unique nor contiguous
    page_order: Mapped[int] = mapped_column(Integer, nullable=False)
    background_color: Mapped[str | None] = mapped_column(String(50), nullable=True)
    background_image_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)

    # Relationships
    scrapbook: Mapped["Scrapbook"] = relationship("Scrapbook", back_populates="pages")  # noqa: F821
    elements: Mapped[list["PageElement"]] = relationship(
        "PageElement",
        back_populates="page",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="PageElement.created_at",
    )

    def __repr__(self) -> str:
        return f"<Page {self.page_order} (scrapbook={self.scrapbook_id})>"


class PageElement(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "page_elements"

    page_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("pages.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False)  # "photo" | "sticker" | "text"
    x_pos: Mapped[float] = mapped_column(Float, nullable=False)
    y_pos: Mapped[float] = mapped_column(Float, nullable=False)
    rotation: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    scale: Mapped[float] = mapped_column(Float, default=1.0, nullable=False)
    z_index: Mapped[int] = mapped_column(Integer, nullable=False)
    properties: Mapped[dict[str, Any]] = mapped_column(JSONType, default=dict, nullable=False)

    # Relationships
    page: Mapped["Page"] = relationship("Page", back_populates="elements")

    def __repr__(self) -> str:
        return f"<PageElement {self.type} z={self.z_index} (page={self.page_id})>"
