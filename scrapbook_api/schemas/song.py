from datetime import datetime
from uuid import UUID

from pydantic import Field

from scrapbook_api.schemas.common import CamelModel, HttpUrlString


class SongCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    artist: str = Field(..., min_length=1, max_length=200)
    file_url: HttpUrlString
    duration_seconds: int = Field(..., strict=True, gt=0)


class SongResponse(CamelModel):
    id: UUID
    title: str
    artist: str
    file_url: str
    duration_seconds: int
    created_at: datetime


class SongListResponse(CamelModel):
    songs: list[SongResponse]


class SongCreatedResponse(CamelModel):
    song: SongResponse


class SongLinkCreate(CamelModel):
    song_id: UUID


class SongLinkResponse(CamelModel):
    id: UUID
    scrapbook_id: UUID
    song_id: UUID
    song: SongResponse
