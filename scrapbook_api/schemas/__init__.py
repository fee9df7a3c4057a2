from scrapbook_api.schemas.element import ElementResponse, ElementSpec
from scrapbook_api.schemas.page import PageCreate, PageDetail, PageLayoutUpdate, PagePatch, PageResponse
from scrapbook_api.schemas.scrapbook import (
    ScrapbookCreate,
    ScrapbookDetail,
    ScrapbookResponse,
    ScrapbookSummary,
    ScrapbookUpdate,
)
from scrapbook_api.schemas.song import SongCreate, SongLinkCreate, SongResponse
from scrapbook_api.schemas.user import UserResponse

__all__ = [
    "UserResponse",
    "ScrapbookCreate",
    "ScrapbookUpdate",
    "ScrapbookResponse",
    "ScrapbookSummary",
    "ScrapbookDetail",
    "PageCreate",
    "PagePatch",
    "PageLayoutUpdate",
    "PageResponse",
    "PageDetail",
    "ElementSpec",
    "ElementResponse",
    "SongCreate",
    "SongLinkCreate",
    "SongResponse",
]
