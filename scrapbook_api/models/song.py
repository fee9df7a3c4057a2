from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from scrapbook_api.models.base import Base, TimestampMixin, UUIDMixin


class Song(Base, UUIDMixin, TimestampMixin):
    """Shared catalog entry; referenced by scrapbooks, owned by nobody."""

    __tablename__ = "songs"

    title: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    artist: Mapped[str] = mapped_column(String(200), nullable=False)
    file_url: Mapped[str] = mapped_column(String(2048), nullable=False)
    duration_seconds: Mapped[int] = mapped_column(Integer, nullable=False)

    def __repr__(self) -> str:
        return f"<Song {self.title} - {self.artist}>"
