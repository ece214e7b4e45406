from serenity.db.models.track import Genre, Track, TrackStatus
from serenity.db.models.favorite import Favorite
from serenity.db.models.play_history import PlayHistory

__all__ = ["Genre", "Track", "TrackStatus", "Favorite", "PlayHistory"]
