import uuid

from sqlalchemy import Boolean, ForeignKey, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from scrapbook_api.models.base import Base, TimestampMixin, UUIDMixin


class Scrapbook(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "scrapbooks"

    # Owner is fixed at creation; updates never touch this column
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    theme_category: Mapped[str] = mapped_column(String(100), nullable=False)
    is_private: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="scrapbooks")  # noqa: F821
    pages: Mapped[list["Page"]] = relationship(  # noqa: F821
        "Page",
        back_populates="scrapbook",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Page.page_order",
    )
    song_links: Mapped[list["ScrapbookSong"]] = relationship(
        "ScrapbookSong",
        back_populates="scrapbook",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Scrapbook {self.title}>"


class ScrapbookSong(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "scrapbook_songs"
    __table_args__ = (
        UniqueConstraint("scrapbook_id", "song_id", name="uq_scrapbook_song"),
    )

    scrapbook_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("scrapbooks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    song_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("songs.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Relationships
    scrapbook: Mapped["Scrapbook"] = relationship("Scrapbook", back_populates="song_links")
    song: Mapped["Song"] = relationship("Song")  # noqa: F821

    def __repr__(self) -> str:
        return f"<ScrapbookSong scrapbook={self.scrapbook_id} song={self.song_id}>"
