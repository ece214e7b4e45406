from typing import Literal, Union

from pydantic import BaseModel


class ReadyOutcome(BaseModel):
    """Successful synthesis. Optional fields left as None are not written."""
    kind: Literal["ready"] = "ready"
    audio_url: str
    image_url: str | None = None
    provider_job_id: str | None = None
    duration: float | None = None

    def patch(self) -> dict:
        return self.model_dump(exclude={"kind"}, exclude_none=True)


class FailedOutcome(BaseModel):
    kind: Literal["failed"] = "failed"


GenerationOutcome = Union[ReadyOutcome, FailedOutcome]


class SunoGenerateRequest(BaseModel):
    prompt: str
    duration: int
    make_instrumental: bool = True


class SunoGenerateResponse(BaseModel):
    audio_url: str
    image_url: str | None = None
    id: str | None = None
    duration: float | None = None

    model_config = {"extra": "ignore"}

    def to_outcome(self) -> ReadyOutcome:
        return ReadyOutcome(
            audio_url=self.audio_url,
            image_url=self.image_url,
            provider_job_id=self.id,
            duration=self.duration,
        )
