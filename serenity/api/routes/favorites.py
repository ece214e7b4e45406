from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from serenity.auth.dependencies import optional_user_id, require_user_id
from serenity.db.session import get_db
from serenity.schemas.track import FavoriteState, TrackOut
from serenity.services.library import favorites

router = APIRouter()


@router.get("", response_model=List[TrackOut])
async def list_favorites(
    user_id: str | None = Depends(optional_user_id),
    db: AsyncSession = Depends(get_db),
):
    if user_id is None:
        return []
    return await favorites.list_favorites(db, user_id)


@router.get("/{track_id}", response_model=FavoriteState)
async def is_favorite(
    track_id: int,
    user_id: str | None = Depends(optional_user_id),
    db: AsyncSession = Depends(get_db),
):
    if user_id is None:
        return FavoriteState(track_id=track_id, favorited=False)
    return FavoriteState(
        track_id=track_id,
        favorited=await favorites.is_favorite(db, user_id, track_id),
    )


@router.post("/{track_id}/toggle", response_model=FavoriteState)
async def toggle_favorite(
    track_id: int,
    user_id: str = Depends(require_user_id),
    db: AsyncSession = Depends(get_db),
):
    favorited = await favorites.toggle_favorite(db, user_id, track_id)
    return FavoriteState(track_id=track_id, favorited=favorited)
