from __future__ import annotations

from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from serenity.core.config import settings
from serenity.core.errors import InvalidTransitionError
from serenity.db.models import PlayHistory, Track, TrackStatus
from serenity.services.events import notify
from serenity.services.library.tracks import get_track


async def record_play(db: AsyncSession, user_id: str, track_id: int) -> PlayHistory:
    track = await get_track(db, user_id, track_id)
    if track.status != TrackStatus.ready:
        raise InvalidTransitionError(f"Track {track_id} is not ready for playback")

    play = PlayHistory(user_id=user_id, track_id=track_id)
    db.add(play)
    await db.commit()
    await notify(user_id, "history.recorded", track_id=track_id)
    return play


async def list_recently_played(
    db: AsyncSession,
    user_id: str,
    window: int | None = None,
    limit: int | None = None,
) -> List[Track]:
    """Distinct ready tracks from the latest play events, most recent first."""
    if window is None:
        window = settings.RECENT_PLAY_WINDOW
    if limit is None:
        limit = settings.RECENT_PLAY_LIMIT

    stmt = (
        select(PlayHistory.track_id)
        .where(PlayHistory.user_id == user_id)
        .order_by(PlayHistory.played_at.desc(), PlayHistory.id.desc())
        .limit(window)
    )
    recent_ids = list((await db.scalars(stmt)).all())
    # dict 는 삽입 순서 유지 -> 최근순 중복 제거
    track_ids = list(dict.fromkeys(recent_ids))[:limit]
    if not track_ids:
        return []

    rows = await db.scalars(
        select(Track).where(
            Track.id.in_(track_ids),
            Track.user_id == user_id,
            Track.status == TrackStatus.ready,
        )
    )
    by_id = {t.id: t for t in rows.all()}
    return [by_id[i] for i in track_ids if i in by_id]
