"""Scrapbook Store.

CRUD over scrapbooks and their song links. Update and delete are
owner-scoped conditional writes: the statement matches on ``(id, user_id)``,
so a non-owner's attempt changes zero rows.
"""

import logging
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from scrapbook_api.exceptions import (
    ScrapbookNotFoundError,
    SongAlreadyLinkedError,
    SongLinkNotFoundError,
    SongNotFoundError,
)
from scrapbook_api.models.base import utcnow
from scrapbook_api.models.page import Page
from scrapbook_api.models.scrapbook import Scrapbook, ScrapbookSong
from scrapbook_api.models.song import Song
from scrapbook_api.schemas.scrapbook import ScrapbookCreate, ScrapbookUpdate
from scrapbook_api.services.ownership import (
    EntityKind,
    OwnershipResolver,
    ensure_allowed,
)

logger = logging.getLogger(__name__)


class ScrapbookService:
    """Service for scrapbook records and song links."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.resolver = OwnershipResolver(db)

    # =========================================================================
    # Reads
    # =========================================================================

    async def list_for_user(self, user_id: UUID) -> list[Scrapbook]:
        """The caller's own scrapbooks, most recently updated first."""
        result = await self.db.execute(
            select(Scrapbook)
            .where(Scrapbook.user_id == user_id)
            .options(
                selectinload(Scrapbook.pages),
                selectinload(Scrapbook.song_links).selectinload(ScrapbookSong.song),
            )
            .order_by(Scrapbook.updated_at.desc())
        )
        return list(result.scalars().all())

    async def get_visible(self, scrapbook_id: UUID, user_id: UUID) -> Scrapbook:
        """Load a scrapbook with pages, elements and songs if the caller may read it.

        Raises:
            ScrapbookNotFoundError: no such scrapbook.
            ForbiddenError: private scrapbook of another user.
        """
        access = await self.resolver.resolve_read(scrapbook_id, user_id)
        ensure_allowed(access, EntityKind.SCRAPBOOK, scrapbook_id)

        result = await self.db.execute(
            select(Scrapbook)
            .where(Scrapbook.id == scrapbook_id)
            .options(
                selectinload(Scrapbook.pages).selectinload(Page.elements),
                selectinload(Scrapbook.song_links).selectinload(ScrapbookSong.song),
            )
        )
        scrapbook = result.scalar_one_or_none()
        if scrapbook is None:
            # Deleted between the check and the load
            raise ScrapbookNotFoundError(scrapbook_id)
        return scrapbook

    # =========================================================================
    # Writes
    # =========================================================================

    async def create(self, user_id: UUID, data: ScrapbookCreate) -> Scrapbook:
        scrapbook = Scrapbook(
            user_id=user_id,
            title=data.title,
            theme_category=data.theme_category,
            is_private=data.is_private,
        )
        self.db.add(scrapbook)
        await self.db.flush()
        logger.info(f"Created scrapbook {scrapbook.id} for user {user_id}")
        return scrapbook

    async def update(self, scrapbook_id: UUID, user_id: UUID, data: ScrapbookUpdate) -> None:
        """Apply supplied fields; zero matched rows means missing or not owned."""
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        changes["updated_at"] = utcnow()

        result = await self.db.execute(
            update(Scrapbook)
            .where(Scrapbook.id == scrapbook_id, Scrapbook.user_id == user_id)
            .values(**changes)
        )
        if result.rowcount == 0:
            raise ScrapbookNotFoundError(scrapbook_id)

    async def delete(self, scrapbook_id: UUID, user_id: UUID) -> None:
        """Delete an owned scrapbook. Pages, elements and song links go with it via FK cascade."""
        result = await self.db.execute(
            delete(Scrapbook).where(Scrapbook.id == scrapbook_id, Scrapbook.user_id == user_id)
        )
        if result.rowcount == 0:
            raise ScrapbookNotFoundError(scrapbook_id)
        logger.info(f"Deleted scrapbook {scrapbook_id}")

    async def _find_link(self, scrapbook_id: UUID, song_id: UUID) -> UUID | None:
        result = await self.db.execute(
            select(ScrapbookSong.id).where(
                ScrapbookSong.scrapbook_id == scrapbook_id,
                ScrapbookSong.song_id == song_id,
            )
        )
        return result.scalar_one_or_none()

    async def add_song(self, scrapbook_id: UUID, user_id: UUID, song_id: UUID) -> ScrapbookSong:
        access = await self.resolver.resolve(EntityKind.SCRAPBOOK, scrapbook_id, user_id)
        ensure_allowed(access, EntityKind.SCRAPBOOK, scrapbook_id)

        song = await self.db.get(Song, song_id)
        if song is None:
            raise SongNotFoundError(song_id)

        if await self._find_link(scrapbook_id, song_id) is not None:
            raise SongAlreadyLinkedError()

        link = ScrapbookSong(scrapbook_id=scrapbook_id, song_id=song_id, song=song)
        self.db.add(link)
        try:
            await self.db.flush()
        except IntegrityError as e:
            # A concurrent request linked the same song after the lookup above
            logger.info(f"Song {song_id} linked concurrently to scrapbook {scrapbook_id}: {e}")
            raise SongAlreadyLinkedError() from e
        return link

    async def remove_song(self, scrapbook_id: UUID, link_id: UUID, user_id: UUID) -> None:
        access = await self.resolver.resolve(EntityKind.SONG_LINK, link_id, user_id)
        ensure_allowed(access, EntityKind.SONG_LINK, link_id)

        result = await self.db.execute(
            delete(ScrapbookSong).where(
                ScrapbookSong.id == link_id,
                ScrapbookSong.scrapbook_id == scrapbook_id,
            )
        )
        if result.rowcount == 0:
            raise SongLinkNotFoundError(link_id)
