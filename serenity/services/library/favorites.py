from __future__ import annotations

from typing import List

from sqlalchemy import delete, select
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from serenity.core.errors import InvalidTransitionError
from serenity.core.logging import logger
from serenity.db.models import Favorite, Track, TrackStatus
from serenity.services.events import notify
from serenity.services.library.tracks import get_track

_TOGGLE_ATTEMPTS = 5


async def is_favorite(db: AsyncSession, user_id: str, track_id: int) -> bool:
    stmt = select(Favorite.id).where(
        Favorite.user_id == user_id, Favorite.track_id == track_id
    )
    return (await db.scalar(stmt.limit(1))) is not None


async def toggle_favorite(db: AsyncSession, user_id: str, track_id: int) -> bool:
    """Flip the favorite mark and return the new state.

    The delete is conditional on the (user, track) row existing; only when it
    removed nothing do we insert. Two concurrent inserts collide on the
    unique constraint (or deadlock on InnoDB gap locks); the loser rolls
    back and retries, which then sees the winner's row. Concurrent
    toggles therefore behave as if applied one after the other.
    """
    await get_track(db, user_id, track_id)

    for attempt in range(1, _TOGGLE_ATTEMPTS + 1):
        try:
            res = await db.execute(
                delete(Favorite).where(
                    Favorite.user_id == user_id, Favorite.track_id == track_id
                )
            )
            if res.rowcount:
                await db.commit()
                favorited = False
            else:
                db.add(Favorite(user_id=user_id, track_id=track_id))
                await db.commit()
                favorited = True
        except DBAPIError as e:
            # 동시 토글에 짐: 유니크 충돌(IntegrityError) 또는 InnoDB 데드락(OperationalError)
            await db.rollback()
            logger.info(
                f"[favorites] toggle raced track={track_id} user={user_id} "
                f"attempt={attempt}/{_TOGGLE_ATTEMPTS}: {e.__class__.__name__}"
            )
            continue

        await notify(user_id, "favorite.toggled", track_id=track_id, favorited=favorited)
        return favorited

    raise InvalidTransitionError(f"Favorite toggle for track {track_id} kept conflicting")


async def list_favorites(db: AsyncSession, user_id: str) -> List[Track]:
    """Ready tracks the user favorited, most recently favorited first."""
    stmt = (
        select(Track)
        .join(Favorite, Favorite.track_id == Track.id)
        .where(
            Favorite.user_id == user_id,
            Track.user_id == user_id,
            Track.status == TrackStatus.ready,
        )
        .order_by(Favorite.created_at.desc(), Favorite.id.desc())
    )
    return list((await db.scalars(stmt)).all())
