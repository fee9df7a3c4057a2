from fastapi import APIRouter, Query, status

from scrapbook_api.api.deps import CurrentUser, DbSession
from scrapbook_api.schemas.song import SongCreate, SongCreatedResponse, SongListResponse, SongResponse
from scrapbook_api.services.song_service import SongService

router = APIRouter()


@router.get("", response_model=SongListResponse)
async def list_songs(
    current_user: CurrentUser,
    db: DbSession,
    search: str | None = Query(None, description="Case-insensitive match on title or artist"),
) -> SongListResponse:
    songs = await SongService(db).list_songs(search)
    return SongListResponse(songs=[SongResponse.model_validate(s) for s in songs])


@router.post("", response_model=SongCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_song(
    body: SongCreate,
    current_user: CurrentUser,
    db: DbSession,
) -> SongCreatedResponse:
    song = await SongService(db).create_song(body)
    return SongCreatedResponse(song=SongResponse.model_validate(song))
