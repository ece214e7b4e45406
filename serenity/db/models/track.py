import enum
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Enum, Float, Index, String, Text

from serenity.db.base import PK, Base


class Genre(str, enum.Enum):
    jazz = "jazz"
    ambient = "ambient"
    lofi = "lofi"
    classical = "classical"


class TrackStatus(str, enum.Enum):
    pending = "pending"
    generating = "generating"
    ready = "ready"
    failed = "failed"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Track(Base):
    __tablename__ = "track"

    id = Column(PK, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False)
    title = Column(String(255), nullable=False)
    prompt = Column(Text, nullable=False)
    # 생성 시점에 Genre 로 검증, 저장은 문자열
    genre = Column(String(32), nullable=False)
    status = Column(Enum(TrackStatus, name="track_status"), nullable=False, default=TrackStatus.pending)
    audio_url = Column(String(1024))
    image_url = Column(String(1024))
    provider_job_id = Column(String(128))
    duration = Column(Float)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_track_user", "user_id"),
        Index("ix_track_user_status", "user_id", "status"),
    )
