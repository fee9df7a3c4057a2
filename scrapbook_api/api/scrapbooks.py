import logging
from uuid import UUID

from fastapi import APIRouter, status

from scrapbook_api.api.deps import CurrentUser, DbSession
from scrapbook_api.models.page import Page
from scrapbook_api.models.scrapbook import Scrapbook
from scrapbook_api.schemas.common import SuccessResponse
from scrapbook_api.schemas.page import PageCreate, PageCreatedResponse, PageDetail, PageResponse
from scrapbook_api.schemas.scrapbook import (
    ScrapbookCreate,
    ScrapbookDetail,
    ScrapbookDetailEnvelope,
    ScrapbookEnvelope,
    ScrapbookListResponse,
    ScrapbookResponse,
    ScrapbookSummary,
    ScrapbookUpdate,
)
from scrapbook_api.schemas.song import SongLinkCreate, SongLinkResponse
from scrapbook_api.services.element_ordering import render_order
from scrapbook_api.services.page_service import PageLayoutService
from scrapbook_api.services.scrapbook_service import ScrapbookService

logger = logging.getLogger(__name__)

router = APIRouter()


def _page_detail(page: Page) -> PageDetail:
    detail = PageDetail.model_validate(page)
    detail.elements = render_order(detail.elements)
    return detail


def _summary(scrapbook: Scrapbook) -> ScrapbookSummary:
    base = ScrapbookResponse.model_validate(scrapbook).model_dump()
    cover = min(scrapbook.pages, key=lambda p: p.page_order) if scrapbook.pages else None
    return ScrapbookSummary(
        **base,
        cover_page=PageResponse.model_validate(cover) if cover else None,
        songs=[SongLinkResponse.model_validate(link) for link in scrapbook.song_links],
        page_count=len(scrapbook.pages),
    )


def _detail(scrapbook: Scrapbook) -> ScrapbookDetail:
    base = ScrapbookResponse.model_validate(scrapbook).model_dump()
    return ScrapbookDetail(
        **base,
        pages=[_page_detail(p) for p in sorted(scrapbook.pages, key=lambda p: p.page_order)],
        songs=[SongLinkResponse.model_validate(link) for link in scrapbook.song_links],
    )


@router.get("", response_model=ScrapbookListResponse)
async def list_scrapbooks(
    current_user: CurrentUser,
    db: DbSession,
) -> ScrapbookListResponse:
    """List the current user's scrapbooks."""
    scrapbooks = await ScrapbookService(db).list_for_user(current_user.id)
    return ScrapbookListResponse(scrapbooks=[_summary(s) for s in scrapbooks])


@router.get("/{scrapbook_id}", response_model=ScrapbookDetailEnvelope)
async def get_scrapbook(
    scrapbook_id: UUID,
    current_user: CurrentUser,
    db: DbSession,
) -> ScrapbookDetailEnvelope:
    """Get a scrapbook with all pages. Private scrapbooks are visible to their owner only."""
    scrapbook = await ScrapbookService(db).get_visible(scrapbook_id, current_user.id)
    return ScrapbookDetailEnvelope(scrapbook=_detail(scrapbook))


@router.post("", response_model=ScrapbookEnvelope, status_code=status.HTTP_201_CREATED)
async def create_scrapbook(
    body: ScrapbookCreate,
    current_user: CurrentUser,
    db: DbSession,
) -> ScrapbookEnvelope:
    scrapbook = await ScrapbookService(db).create(current_user.id, body)
    return ScrapbookEnvelope(scrapbook=ScrapbookResponse.model_validate(scrapbook))


@router.patch("/{scrapbook_id}", response_model=SuccessResponse)
async def update_scrapbook(
    scrapbook_id: UUID,
    body: ScrapbookUpdate,
    current_user: CurrentUser,
    db: DbSession,
) -> SuccessResponse:
    await ScrapbookService(db).update(scrapbook_id, current_user.id, body)
    return SuccessResponse()


@router.delete("/{scrapbook_id}", response_model=SuccessResponse)
async def delete_scrapbook(
    scrapbook_id: UUID,
    current_user: CurrentUser,
    db: DbSession,
) -> SuccessResponse:
    await ScrapbookService(db).delete(scrapbook_id, current_user.id)
    return SuccessResponse()


# =============================================================================
# Songs
# =============================================================================


@router.post(
    "/{scrapbook_id}/songs",
    response_model=SongLinkResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_song(
    scrapbook_id: UUID,
    body: SongLinkCreate,
    current_user: CurrentUser,
    db: DbSession,
) -> SongLinkResponse:
    """Link a catalog song to the scrapbook's playlist."""
    link = await ScrapbookService(db).add_song(scrapbook_id, current_user.id, body.song_id)
    return SongLinkResponse.model_validate(link)


@router.delete("/{scrapbook_id}/songs/{link_id}", response_model=SuccessResponse)
async def remove_song(
    scrapbook_id: UUID,
    link_id: UUID,
    current_user: CurrentUser,
    db: DbSession,
) -> SuccessResponse:
    await ScrapbookService(db).remove_song(scrapbook_id, link_id, current_user.id)
    return SuccessResponse()


# =============================================================================
# Pages
# =============================================================================


@router.post(
    "/{scrapbook_id}/pages",
    response_model=PageCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_page(
    scrapbook_id: UUID,
    body: PageCreate,
    current_user: CurrentUser,
    db: DbSession,
) -> PageCreatedResponse:
    page = await PageLayoutService(db).create_page(scrapbook_id, current_user.id, body)
    return PageCreatedResponse(page=PageResponse.model_validate(page))
