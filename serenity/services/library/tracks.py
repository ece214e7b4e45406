"""Track lifecycle: pending -> generating -> ready | failed.

Every function takes the caller's ``user_id`` explicitly and re-checks
ownership before touching a row. A track owned by someone else is reported
exactly like a missing one.
"""
from __future__ import annotations

from typing import List

from sqlalchemy import delete, select
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from serenity.core.config import settings
from serenity.core.errors import (
    CascadeDeleteError,
    InvalidTransitionError,
    NotFoundError,
    TrackValidationError,
)
from serenity.core.logging import logger
from serenity.db.models import Favorite, Genre, PlayHistory, Track, TrackStatus
from serenity.schemas.generation import FailedOutcome, GenerationOutcome, ReadyOutcome
from serenity.services.events import notify

# ready / failed 는 종료 상태
_TRANSITIONS = {
    TrackStatus.pending: {TrackStatus.generating},
    TrackStatus.generating: {TrackStatus.generating, TrackStatus.ready, TrackStatus.failed},
    TrackStatus.ready: set(),
    TrackStatus.failed: set(),
}


def _check_transition(track: Track, target: TrackStatus) -> None:
    current = TrackStatus(track.status)
    if target not in _TRANSITIONS[current]:
        raise InvalidTransitionError(
            f"Track {track.id} cannot move from {current.value} to {target.value}"
        )


async def get_track(db: AsyncSession, user_id: str, track_id: int) -> Track:
    track = await db.get(Track, track_id)
    if track is None or track.user_id != user_id:
        raise NotFoundError("Track not found")
    return track


async def create_track(
    db: AsyncSession, user_id: str, title: str, prompt: str, genre: str
) -> Track:
    title = (title or "").strip()
    prompt = (prompt or "").strip()
    if not title:
        raise TrackValidationError("Title must not be empty")
    if not prompt:
        raise TrackValidationError("Prompt must not be empty")
    try:
        genre = Genre(genre).value
    except ValueError:
        raise TrackValidationError(f"Unsupported genre: {genre!r}")

    track = Track(
        user_id=user_id,
        title=title,
        prompt=prompt,
        genre=genre,
        status=TrackStatus.pending,
    )
    db.add(track)
    await db.commit()
    await db.refresh(track)
    logger.info(f"[tracks] created track={track.id} user={user_id} genre={genre}")
    await notify(user_id, "track.created", track_id=track.id, status=track.status.value)
    return track


async def list_tracks(db: AsyncSession, user_id: str, genre: str | None = None) -> List[Track]:
    stmt = select(Track).where(Track.user_id == user_id)
    if genre:
        stmt = stmt.where(Track.genre == genre)
    stmt = stmt.order_by(Track.created_at.desc(), Track.id.desc())
    return list((await db.scalars(stmt)).all())


async def list_ready_tracks(db: AsyncSession, user_id: str) -> List[Track]:
    stmt = (
        select(Track)
        .where(Track.user_id == user_id, Track.status == TrackStatus.ready)
        .order_by(Track.created_at.desc(), Track.id.desc())
    )
    return list((await db.scalars(stmt)).all())


async def begin_generation(db: AsyncSession, user_id: str, track_id: int) -> Track:
    track = await get_track(db, user_id, track_id)
    _check_transition(track, TrackStatus.generating)
    if track.status == TrackStatus.generating:
        return track

    track.status = TrackStatus.generating
    await db.commit()
    await notify(user_id, "track.updated", track_id=track.id, status=track.status.value)
    return track


async def complete_generation(
    db: AsyncSession, user_id: str, track_id: int, outcome: GenerationOutcome
) -> Track:
    track = await get_track(db, user_id, track_id)
    if isinstance(outcome, ReadyOutcome):
        _check_transition(track, TrackStatus.ready)
        track.status = TrackStatus.ready
        # 결과에 있는 필드만 기록 (없는 필드는 건드리지 않음)
        for field, value in outcome.patch().items():
            setattr(track, field, value)
    elif isinstance(outcome, FailedOutcome):
        _check_transition(track, TrackStatus.failed)
        track.status = TrackStatus.failed
    else:
        raise TypeError(f"Unknown generation outcome: {outcome!r}")

    await db.commit()
    await notify(user_id, "track.updated", track_id=track.id, status=track.status.value)
    return track


async def delete_track(db: AsyncSession, user_id: str, track_id: int) -> None:
    """Delete a track with its favorites and play history in one transaction.

    Transient database errors roll the whole cascade back and retry; after
    ``DELETE_RETRY_ATTEMPTS`` the caller gets ``CascadeDeleteError``.
    """
    attempts = max(1, settings.DELETE_RETRY_ATTEMPTS)
    for attempt in range(1, attempts + 1):
        track = await get_track(db, user_id, track_id)
        try:
            await db.execute(delete(Favorite).where(Favorite.track_id == track_id))
            await db.execute(delete(PlayHistory).where(PlayHistory.track_id == track_id))
            await db.execute(
                delete(Track)
                .where(Track.id == track_id, Track.user_id == user_id)
                .execution_options(synchronize_session=False)
            )
            await db.commit()
        except DBAPIError as e:
            await db.rollback()
            logger.warning(
                f"[tracks] delete cascade failed track={track_id} attempt={attempt}/{attempts}: {e}"
            )
            continue

        db.expunge(track)
        logger.info(f"[tracks] deleted track={track_id} user={user_id}")
        await notify(user_id, "track.deleted", track_id=track_id)
        return

    raise CascadeDeleteError(f"Could not delete track {track_id}; nothing was removed")
