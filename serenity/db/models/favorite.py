from sqlalchemy import Column, DateTime, ForeignKey, Index, String, UniqueConstraint

from serenity.db.base import PK, Base
from serenity.db.models.track import utcnow


class Favorite(Base):
    __tablename__ = "favorite"

    id = Column(PK, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False)
    track_id = Column(PK, ForeignKey("track.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        # (user, track) 당 최대 1행: 동시 토글의 중재자
        UniqueConstraint("user_id", "track_id", name="uq_favorite_user_track"),
        Index("ix_favorite_user", "user_id"),
        Index("ix_favorite_track", "track_id"),
    )
