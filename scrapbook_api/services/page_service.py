"""Page Layout Service.

Provides functionality for:
- Creating pages under an owned scrapbook
- Replacing a page's whole layout atomically (page properties + element set)
- Adding a single element to a page
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from scrapbook_api.exceptions import StorageError
from scrapbook_api.models.page import Page, PageElement
from scrapbook_api.schemas.element import ElementSpec
from scrapbook_api.schemas.page import PageCreate, PagePatch
from scrapbook_api.services.element_ordering import (
    creation_stamps,
    normalize_elements,
    validate_element,
)
from scrapbook_api.services.ownership import EntityKind, OwnershipResolver, ensure_allowed

logger = logging.getLogger(__name__)


class PageLayoutService:
    """Page writes, each gated by the page's ownership chain."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.resolver = OwnershipResolver(db)

    async def create_page(self, scrapbook_id: UUID, user_id: UUID, data: PageCreate) -> Page:
        access = await self.resolver.resolve(EntityKind.SCRAPBOOK, scrapbook_id, user_id)
        ensure_allowed(access, EntityKind.SCRAPBOOK, scrapbook_id)

        page = Page(
            scrapbook_id=scrapbook_id,
            page_order=data.page_order,
            background_color=data.background_color,
            background_image_url=data.background_image_url,
        )
        self.db.add(page)
        await self.db.flush()
        return page

    async def replace_layout(
        self,
        page_id: UUID,
        user_id: UUID,
        patch: PagePatch | None = None,
        elements: Sequence[ElementSpec | Mapping[str, Any]] | None = None,
    ) -> None:
        """Apply page property changes and replace the element set in one transaction.

        ``elements=None`` leaves the existing elements untouched. An empty
        sequence deletes them all. Page fields the patch does not carry are
        left as they are.

        Ownership is checked inside the same transaction as the writes, with
        the page's chain locked, so the check cannot go stale before commit.

        Raises:
            PageNotFoundError: page does not exist.
            ForbiddenError: page belongs to another user's scrapbook.
            ElementValidationError: an element is malformed; nothing is written.
            StorageError: the storage engine failed; the transaction is rolled back.
        """
        access = await self.resolver.resolve(EntityKind.PAGE, page_id, user_id, lock=True)
        ensure_allowed(access, EntityKind.PAGE, page_id)

        # Validate everything up front so a bad element never reaches the delete phase
        specs = normalize_elements(elements) if elements is not None else None
        changes = patch.changes() if patch is not None else {}

        try:
            if changes:
                await self.db.execute(update(Page).where(Page.id == page_id).values(**changes))

            if specs is not None:
                await self.db.execute(delete(PageElement).where(PageElement.page_id == page_id))
                self.db.add_all(
                    [
                        PageElement(page_id=page_id, created_at=stamp, **spec.to_columns())
                        for spec, stamp in zip(specs, creation_stamps(len(specs)))
                    ]
                )

            await self.db.flush()
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.exception(f"[REPLACE_LAYOUT] Rolled back layout of page {page_id}: {e}")
            raise StorageError(f"Failed to update page {page_id}") from e

        logger.info(
            f"[REPLACE_LAYOUT] page={page_id} user={user_id} "
            f"fields={sorted(changes)} elements={'unchanged' if specs is None else len(specs)}"
        )

    async def add_element(
        self,
        page_id: UUID,
        user_id: UUID,
        element: ElementSpec | Mapping[str, Any],
    ) -> PageElement:
        """Insert one element next to the existing ones."""
        access = await self.resolver.resolve(EntityKind.PAGE, page_id, user_id)
        ensure_allowed(access, EntityKind.PAGE, page_id)

        spec = validate_element(element)
        latest = await self.db.scalar(
            select(func.max(PageElement.created_at)).where(PageElement.page_id == page_id)
        )
        [stamp] = creation_stamps(1, after=latest)
        row = PageElement(page_id=page_id, created_at=stamp, **spec.to_columns())
        self.db.add(row)
        await self.db.flush()
        return row
