from typing import List

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_202_ACCEPTED, HTTP_204_NO_CONTENT, HTTP_201_CREATED

from serenity.auth.dependencies import optional_user_id, require_user_id
from serenity.core.errors import NotFoundError
from serenity.db.models import Genre
from serenity.db.session import get_db
from serenity.schemas.track import PlayOut, TrackCreate, TrackOut
from serenity.services.library import history, tracks
from serenity.services.tasks.queue import dispatch_generation

router = APIRouter()


@router.get("", response_model=List[TrackOut])
async def list_tracks(
    genre: Genre | None = Query(None),
    user_id: str | None = Depends(optional_user_id),
    db: AsyncSession = Depends(get_db),
):
    if user_id is None:
        return []
    return await tracks.list_tracks(db, user_id, genre.value if genre else None)


@router.get("/ready", response_model=List[TrackOut])
async def list_ready_tracks(
    user_id: str | None = Depends(optional_user_id),
    db: AsyncSession = Depends(get_db),
):
    if user_id is None:
        return []
    return await tracks.list_ready_tracks(db, user_id)


@router.get("/recent", response_model=List[TrackOut])
async def list_recently_played(
    user_id: str | None = Depends(optional_user_id),
    db: AsyncSession = Depends(get_db),
):
    if user_id is None:
        return []
    return await history.list_recently_played(db, user_id)


@router.get("/{track_id}", response_model=TrackOut)
async def get_track(
    track_id: int,
    user_id: str | None = Depends(optional_user_id),
    db: AsyncSession = Depends(get_db),
):
    if user_id is None:
        raise NotFoundError("Track not found")
    return await tracks.get_track(db, user_id, track_id)


# ------- mutations -------
@router.post("", response_model=TrackOut, status_code=HTTP_202_ACCEPTED)
async def generate_track(
    body: TrackCreate,
    user_id: str = Depends(require_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Create a pending track and start generation without waiting for it."""
    track = await tracks.create_track(db, user_id, body.title, body.prompt, body.genre.value)
    await dispatch_generation(track.id, user_id, track.prompt, track.genre)
    return track


@router.post("/{track_id}/plays", response_model=PlayOut, status_code=HTTP_201_CREATED)
async def record_play(
    track_id: int,
    user_id: str = Depends(require_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await history.record_play(db, user_id, track_id)


@router.delete("/{track_id}", status_code=HTTP_204_NO_CONTENT)
async def delete_track(
    track_id: int,
    user_id: str = Depends(require_user_id),
    db: AsyncSession = Depends(get_db),
):
    await tracks.delete_track(db, user_id, track_id)
    return Response(status_code=HTTP_204_NO_CONTENT)
