"""Ownership chain resolution.

Every mutation is authorized by walking the entity's parents up to the
owning user:

- scrapbook -> user
- page -> scrapbook -> user
- element -> page -> scrapbook -> user
- song link -> scrapbook -> user

The resolver answers with an ``Access`` value and never raises for a
missing or foreign entity; callers turn the answer into an error with
``ensure_allowed``.
"""

import enum
import logging
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from scrapbook_api.exceptions import (
    ElementNotFoundError,
    ForbiddenError,
    PageNotFoundError,
    ResourceNotFoundError,
    ScrapbookNotFoundError,
    SongLinkNotFoundError,
)
from scrapbook_api.models.page import Page, PageElement
from scrapbook_api.models.scrapbook import Scrapbook, ScrapbookSong

logger = logging.getLogger(__name__)


class Access(str, enum.Enum):
    ALLOW = "allow"
    DENY = "deny"
    NOT_FOUND = "not_found"


class EntityKind(str, enum.Enum):
    SCRAPBOOK = "scrapbook"
    PAGE = "page"
    ELEMENT = "element"
    SONG_LINK = "song_link"


_NOT_FOUND_ERRORS: dict[EntityKind, type[ResourceNotFoundError]] = {
    EntityKind.SCRAPBOOK: ScrapbookNotFoundError,
    EntityKind.PAGE: PageNotFoundError,
    EntityKind.ELEMENT: ElementNotFoundError,
    EntityKind.SONG_LINK: SongLinkNotFoundError,
}


def _owner_query(kind: EntityKind, entity_id: UUID) -> Select:
    """SELECT the owning scrapbook's user_id for an entity, joined along its chain."""
    stmt = select(Scrapbook.user_id)
    if kind is EntityKind.SCRAPBOOK:
        return stmt.where(Scrapbook.id == entity_id)
    if kind is EntityKind.PAGE:
        return stmt.join(Page, Page.scrapbook_id == Scrapbook.id).where(Page.id == entity_id)
    if kind is EntityKind.ELEMENT:
        return (
            stmt.join(Page, Page.scrapbook_id == Scrapbook.id)
            .join(PageElement, PageElement.page_id == Page.id)
            .where(PageElement.id == entity_id)
        )
    if kind is EntityKind.SONG_LINK:
        return stmt.join(ScrapbookSong, ScrapbookSong.scrapbook_id == Scrapbook.id).where(
            ScrapbookSong.id == entity_id
        )
    raise ValueError(f"Unknown entity kind: {kind}")


def mutation_access(owner_id: UUID | None, user_id: UUID) -> Access:
    if owner_id is None:
        return Access.NOT_FOUND
    return Access.ALLOW if owner_id == user_id else Access.DENY


def read_access(owner_id: UUID | None, is_private: bool, user_id: UUID) -> Access:
    """Public scrapbooks are readable by anyone; private ones only by their owner."""
    if owner_id is None:
        return Access.NOT_FOUND
    if not is_private or owner_id == user_id:
        return Access.ALLOW
    return Access.DENY


def ensure_allowed(access: Access, kind: EntityKind, entity_id: UUID) -> None:
    """Map a resolver answer onto NotFound / Forbidden errors."""
    if access is Access.NOT_FOUND:
        raise _NOT_FOUND_ERRORS[kind](entity_id)
    if access is Access.DENY:
        raise ForbiddenError(f"Access denied to {kind.value} {entity_id}")


class OwnershipResolver:
    """Answers whether a user may mutate (or read) an entity."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def resolve(
        self,
        kind: EntityKind,
        entity_id: UUID,
        user_id: UUID,
        *,
        lock: bool = False,
    ) -> Access:
        """Resolve mutation rights for ``user_id`` on an entity.

        With ``lock=True`` the rows along the chain are read ``FOR UPDATE`` so
        the check holds for the rest of the caller's transaction.
        """
        stmt = _owner_query(kind, entity_id)
        if lock:
            stmt = stmt.with_for_update()
        owner_id = (await self.db.execute(stmt)).scalar_one_or_none()
        access = mutation_access(owner_id, user_id)
        if access is Access.DENY:
            logger.warning(f"User {user_id} denied mutation of {kind.value} {entity_id}")
        return access

    async def resolve_read(self, scrapbook_id: UUID, user_id: UUID) -> Access:
        result = await self.db.execute(
            select(Scrapbook.user_id, Scrapbook.is_private).where(Scrapbook.id == scrapbook_id)
        )
        row = result.one_or_none()
        if row is None:
            return Access.NOT_FOUND
        return read_access(row.user_id, row.is_private, user_id)
