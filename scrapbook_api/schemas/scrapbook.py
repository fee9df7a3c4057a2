from datetime import datetime
from uuid import UUID

from pydantic import Field

from scrapbook_api.schemas.common import CamelModel
from scrapbook_api.schemas.page import PageDetail, PageResponse
from scrapbook_api.schemas.song import SongLinkResponse


class ScrapbookCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    theme_category: str = Field(..., max_length=100)
    is_private: bool = False


class ScrapbookUpdate(CamelModel):
    title: str | None = Field(None, min_length=1, max_length=200)
    theme_category: str | None = Field(None, max_length=100)
    is_private: bool | None = None


class ScrapbookResponse(CamelModel):
    id: UUID
    user_id: UUID
    title: str
    theme_category: str
    is_private: bool
    created_at: datetime
    updated_at: datetime


class ScrapbookSummary(ScrapbookResponse):
    """List entry: cover page (lowest pageOrder), linked songs and page count."""

    cover_page: PageResponse | None = None
    songs: list[SongLinkResponse] = Field(default_factory=list)
    page_count: int = 0


class ScrapbookDetail(ScrapbookResponse):
    pages: list[PageDetail] = Field(default_factory=list)
    songs: list[SongLinkResponse] = Field(default_factory=list)


class ScrapbookListResponse(CamelModel):
    scrapbooks: list[ScrapbookSummary]


class ScrapbookEnvelope(CamelModel):
    scrapbook: ScrapbookResponse


class ScrapbookDetailEnvelope(CamelModel):
    scrapbook: ScrapbookDetail
