from sqlalchemy import Column, DateTime, ForeignKey, Index, String

from serenity.db.base import PK, Base
from serenity.db.models.track import utcnow


class PlayHistory(Base):
    __tablename__ = "play_history"

    id = Column(PK, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False)
    track_id = Column(PK, ForeignKey("track.id", ondelete="CASCADE"), nullable=False)
    played_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index("ix_play_history_user_recent", "user_id", "played_at"),
        Index("ix_play_history_track", "track_id"),
    )
