"""Shared song catalog."""

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from scrapbook_api.models.song import Song
from scrapbook_api.schemas.song import SongCreate


class SongService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_songs(self, search: str | None = None) -> list[Song]:
        """All songs by title; ``search`` matches title OR artist, case-insensitively."""
        stmt = select(Song).order_by(Song.title.asc())
        if search:
            stmt = stmt.where(
                or_(
                    Song.title.icontains(search, autoescape=True),
                    Song.artist.icontains(search, autoescape=True),
                )
            )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def create_song(self, data: SongCreate) -> Song:
        song = Song(
            title=data.title,
            artist=data.artist,
            file_url=data.file_url,
            duration_seconds=data.duration_seconds,
        )
        self.db.add(song)
        await self.db.flush()
        return song
