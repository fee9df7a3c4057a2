from scrapbook_api.models.base import Base
from scrapbook_api.models.page import Page, PageElement
from scrapbook_api.models.scrapbook import Scrapbook, ScrapbookSong
from scrapbook_api.models.song import Song
from scrapbook_api.models.user import User

__all__ = [
    "Base",
    "User",
    "Scrapbook",
    "ScrapbookSong",
    "Page",
    "PageElement",
    "Song",
]
