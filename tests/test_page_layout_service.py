"""Tests for the page layout synchronizer (PageLayoutService.replace_layout).

Covers:
- Ownership gate (NotFound / Forbidden) with no writes on failure
- Absent vs. empty element list
- Partial page property updates
- Exact replacement and render order
- Atomic rollback when the storage engine fails mid-write
- Insertion order for equal zIndex independent of the wall clock
"""

import uuid
from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import OperationalError

from scrapbook_api.exceptions import (
    ElementValidationError,
    ForbiddenError,
    PageNotFoundError,
    ScrapbookNotFoundError,
    StorageError,
)
from scrapbook_api.schemas.page import PageCreate, PagePatch
from scrapbook_api.services import element_ordering
from scrapbook_api.services.element_ordering import render_order
from scrapbook_api.services.page_service import PageLayoutService


def _fields(element) -> tuple:
    return (
        element.type,
        element.x_pos,
        element.y_pos,
        element.rotation,
        element.scale,
        element.z_index,
        element.properties,
    )


LAYOUT = [
    {
        "type": "photo",
        "xPos": 12.5,
        "yPos": 30,
        "rotation": 15,
        "scale": 1.5,
        "zIndex": 3,
        "properties": {"imageUrl": "https://cdn.example.com/a.jpg", "caption": "Pier"},
    },
    {
        "type": "text",
        "xPos": 0,
        "yPos": 0,
        "zIndex": 1,
        "properties": {"content": "Hello", "font": "Caveat", "fontSize": 18},
    },
    {
        "type": "sticker",
        "xPos": 100,
        "yPos": 200,
        "zIndex": 2,
        "scale": 0.5,
        "properties": {"stickerId": "heart"},
    },
]


class TestReplaceLayoutAccess:
    @pytest.mark.asyncio
    async def test_non_owner_is_forbidden_and_nothing_changes(self, db, seeded, read_elements, read_page):
        before = await read_elements(seeded.page_id)

        with pytest.raises(ForbiddenError):
            await PageLayoutService(db).replace_layout(
                seeded.page_id,
                seeded.other_id,
                patch=PagePatch(background_color="#ffffff"),
                elements=[],
            )

        after = await read_elements(seeded.page_id)
        assert {e.id for e in after} == {e.id for e in before}
        assert (await read_page(seeded.page_id)).background_color == "#000000"

    @pytest.mark.asyncio
    async def test_missing_page_is_not_found(self, db, seeded):
        with pytest.raises(PageNotFoundError):
            await PageLayoutService(db).replace_layout(uuid.uuid4(), seeded.owner_id, elements=[])

    @pytest.mark.asyncio
    async def test_not_found_is_checked_before_element_validation(self, db, seeded):
        with pytest.raises(PageNotFoundError):
            await PageLayoutService(db).replace_layout(
                uuid.uuid4(), seeded.owner_id, elements=[{"type": "video"}]
            )


class TestReplaceLayoutSemantics:
    @pytest.mark.asyncio
    async def test_scenario_sticker_replaces_text_and_photo(self, db, seeded, read_elements, read_page):
        await PageLayoutService(db).replace_layout(
            seeded.page_id,
            seeded.owner_id,
            patch=PagePatch(background_color="#fff"),
            elements=[
                {
                    "type": "sticker",
                    "xPos": 10,
                    "yPos": 20,
                    "zIndex": 1,
                    "scale": 2,
                    "properties": {"stickerId": "star"},
                }
            ],
        )

        page = await read_page(seeded.page_id)
        assert page.background_color == "#fff"

        elements = await read_elements(seeded.page_id)
        assert len(elements) == 1
        sticker = elements[0]
        assert _fields(sticker) == ("sticker", 10.0, 20.0, 0.0, 2.0, 1, {"stickerId": "star"})
        assert not any(e.type in ("text", "photo") for e in elements)
        assert sticker.id not in seeded.element_ids

    @pytest.mark.asyncio
    async def test_empty_list_deletes_all_elements(self, db, seeded, read_elements):
        await PageLayoutService(db).replace_layout(seeded.page_id, seeded.owner_id, elements=[])

        assert await read_elements(seeded.page_id) == []

    @pytest.mark.asyncio
    async def test_absent_elements_leave_existing_untouched(self, db, seeded, read_elements, read_page):
        await PageLayoutService(db).replace_layout(
            seeded.page_id,
            seeded.owner_id,
            patch=PagePatch(background_image_url="https://cdn.example.com/paper.png"),
            elements=None,
        )

        elements = await read_elements(seeded.page_id)
        assert {e.id for e in elements} == set(seeded.element_ids)
        page = await read_page(seeded.page_id)
        assert page.background_image_url == "https://cdn.example.com/paper.png"
        assert page.background_color == "#000000"

    @pytest.mark.asyncio
    async def test_omitted_page_fields_are_not_cleared(self, db, seeded, read_page):
        await PageLayoutService(db).replace_layout(
            seeded.page_id, seeded.owner_id, patch=PagePatch(), elements=[]
        )

        page = await read_page(seeded.page_id)
        assert page.background_color == "#000000"
        assert page.background_image_url is None

    @pytest.mark.asyncio
    async def test_explicit_null_clears_a_page_field(self, db, seeded, read_page):
        await PageLayoutService(db).replace_layout(
            seeded.page_id, seeded.owner_id, patch=PagePatch(background_color=None)
        )

        assert (await read_page(seeded.page_id)).background_color is None

    @pytest.mark.asyncio
    async def test_elements_match_submission_and_render_by_z_index(self, db, seeded, read_elements):
        await PageLayoutService(db).replace_layout(seeded.page_id, seeded.owner_id, elements=LAYOUT)

        stored = render_order(await read_elements(seeded.page_id))
        assert len(stored) == len(LAYOUT)
        assert [e.type for e in stored] == ["text", "sticker", "photo"]
        text, sticker, photo = stored
        assert _fields(photo) == (
            "photo",
            12.5,
            30.0,
            15.0,
            1.5,
            3,
            {"imageUrl": "https://cdn.example.com/a.jpg", "caption": "Pier"},
        )
        assert (text.rotation, text.scale) == (0.0, 1.0)
        assert text.properties == {"content": "Hello", "font": "Caveat", "fontSize": 18}
        assert sticker.scale == 0.5

    @pytest.mark.asyncio
    async def test_same_layout_twice_gives_same_state(self, db, seeded, read_elements):
        service = PageLayoutService(db)

        await service.replace_layout(seeded.page_id, seeded.owner_id, elements=LAYOUT)
        first = await read_elements(seeded.page_id)
        await service.replace_layout(seeded.page_id, seeded.owner_id, elements=LAYOUT)
        second = await read_elements(seeded.page_id)

        assert [_fields(e) for e in render_order(first)] == [_fields(e) for e in render_order(second)]
        assert {e.id for e in first}.isdisjoint({e.id for e in second})


class TestReplaceLayoutFailures:
    @pytest.mark.asyncio
    async def test_invalid_element_writes_nothing(self, db, seeded, read_elements, read_page):
        bad_layout = LAYOUT + [{"type": "sticker", "xPos": 1, "yPos": 1, "zIndex": 0, "scale": 0,
                                "properties": {"stickerId": "x"}}]

        with pytest.raises(ElementValidationError) as exc_info:
            await PageLayoutService(db).replace_layout(
                seeded.page_id,
                seeded.owner_id,
                patch=PagePatch(background_color="#123456"),
                elements=bad_layout,
            )

        assert exc_info.value.location.index == 3
        await db.rollback()
        assert {e.id for e in await read_elements(seeded.page_id)} == set(seeded.element_ids)
        assert (await read_page(seeded.page_id)).background_color == "#000000"

    @pytest.mark.asyncio
    async def test_storage_failure_after_insert_rolls_back_everything(
        self, db, seeded, read_elements, read_page, monkeypatch
    ):
        real_flush = db.flush

        async def flush_then_fail(*args, **kwargs):
            await real_flush(*args, **kwargs)
            raise OperationalError("INSERT INTO page_elements", {}, Exception("disk I/O error"))

        monkeypatch.setattr(db, "flush", flush_then_fail)

        with pytest.raises(StorageError):
            await PageLayoutService(db).replace_layout(
                seeded.page_id,
                seeded.owner_id,
                patch=PagePatch(background_color="#abcdef"),
                elements=LAYOUT,
            )

        elements = await read_elements(seeded.page_id)
        assert {e.id for e in elements} == set(seeded.element_ids)
        assert sorted(e.type for e in elements) == ["photo", "text"]
        assert (await read_page(seeded.page_id)).background_color == "#000000"


class TestAddElement:
    @pytest.mark.asyncio
    async def test_add_element_is_additive(self, db, seeded, read_elements):
        row = await PageLayoutService(db).add_element(
            seeded.page_id,
            seeded.owner_id,
            {"type": "text", "xPos": 1, "yPos": 2, "zIndex": 9, "properties": {"content": "PS"}},
        )
        await db.commit()

        elements = await read_elements(seeded.page_id)
        assert {e.id for e in elements} == set(seeded.element_ids) | {row.id}

    @pytest.mark.asyncio
    async def test_add_element_forbidden_for_non_owner(self, db, seeded):
        with pytest.raises(ForbiddenError):
            await PageLayoutService(db).add_element(
                seeded.page_id,
                seeded.other_id,
                {"type": "sticker", "xPos": 1, "yPos": 2, "zIndex": 0, "properties": {"stickerId": "x"}},
            )


class TestInsertionOrderTies:
    """Equal zIndex renders in insertion order whatever the wall clock does."""

    @pytest.mark.asyncio
    async def test_frozen_clock_keeps_submission_order(self, db, seeded, read_elements, monkeypatch):
        frozen = datetime(2024, 7, 1, 12, 0, tzinfo=timezone.utc)
        monkeypatch.setattr(element_ordering, "utcnow", lambda: frozen)
        stickers = [
            {"type": "sticker", "xPos": 0, "yPos": 0, "zIndex": 0, "properties": {"stickerId": name}}
            for name in ("first", "second", "third", "fourth")
        ]

        await PageLayoutService(db).replace_layout(seeded.page_id, seeded.owner_id, elements=stickers)

        stored = render_order(await read_elements(seeded.page_id))
        assert [e.properties["stickerId"] for e in stored] == ["first", "second", "third", "fourth"]

    @pytest.mark.asyncio
    async def test_added_element_sorts_last_when_clock_steps_back(
        self, db, seeded, read_elements, monkeypatch
    ):
        monkeypatch.setattr(
            element_ordering, "utcnow", lambda: datetime(2000, 1, 1, tzinfo=timezone.utc)
        )

        row = await PageLayoutService(db).add_element(
            seeded.page_id,
            seeded.owner_id,
            {"type": "sticker", "xPos": 1, "yPos": 1, "zIndex": 5, "properties": {"stickerId": "late"}},
        )
        row_id = row.id
        await db.commit()

        stored = render_order(await read_elements(seeded.page_id))
        assert [e.z_index for e in stored] == [0, 5, 5]
        assert stored[-1].id == row_id


class TestCreatePage:
    @pytest.mark.asyncio
    async def test_create_page_under_owned_scrapbook(self, db, seeded):
        page = await PageLayoutService(db).create_page(
            seeded.scrapbook_id,
            seeded.owner_id,
            PageCreate(page_order=0, background_image_url="https://cdn.example.com/bg.png"),
        )

        assert page.scrapbook_id == seeded.scrapbook_id
        assert page.page_order == 0
        assert page.background_image_url == "https://cdn.example.com/bg.png"

    @pytest.mark.asyncio
    async def test_create_page_forbidden_and_not_found(self, db, seeded):
        service = PageLayoutService(db)
        with pytest.raises(ForbiddenError):
            await service.create_page(seeded.scrapbook_id, seeded.other_id, PageCreate(page_order=1))
        with pytest.raises(ScrapbookNotFoundError):
            await service.create_page(uuid.uuid4(), seeded.owner_id, PageCreate(page_order=1))

    @pytest.mark.asyncio
    async def test_image_urls_stored_as_submitted(self, db, seeded, read_page):
        service = PageLayoutService(db)
        page = await service.create_page(
            seeded.scrapbook_id,
            seeded.owner_id,
            PageCreate(page_order=2, background_image_url="https://cdn.example.com"),
        )
        assert page.background_image_url == "https://cdn.example.com"

        await service.replace_layout(
            seeded.page_id,
            seeded.owner_id,
            patch=PagePatch(background_image_url="HTTPS://CDN.example.com"),
        )
        assert (await read_page(seeded.page_id)).background_image_url == "HTTPS://CDN.example.com"
