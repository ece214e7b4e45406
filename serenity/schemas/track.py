from datetime import datetime

from pydantic import BaseModel, field_validator

from serenity.db.models.track import Genre, TrackStatus


class TrackCreate(BaseModel):
    title: str
    prompt: str
    genre: Genre

    @field_validator("title", "prompt")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v


class TrackOut(BaseModel):
    id: int
    title: str
    prompt: str
    genre: str
    status: TrackStatus
    audio_url: str | None = None
    image_url: str | None = None
    provider_job_id: str | None = None
    duration: float | None = None
    created_at: datetime

    class Config:
        from_attributes = True


class FavoriteState(BaseModel):
    track_id: int
    favorited: bool


class PlayOut(BaseModel):
    track_id: int
    played_at: datetime

    class Config:
        from_attributes = True


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
