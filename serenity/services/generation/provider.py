"""Synthesis providers.

``get_provider`` picks the real Suno client when ``SUNO_API_KEY`` is
configured and the deterministic demo provider otherwise.
"""
from __future__ import annotations

import asyncio
from typing import Protocol

import httpx
from pydantic import ValidationError

from serenity.core.config import settings
from serenity.core.errors import ProviderError
from serenity.core.logging import logger
from serenity.schemas.generation import (
    ReadyOutcome,
    SunoGenerateRequest,
    SunoGenerateResponse,
)
from serenity.services.generation.prompts import demo_audio_url


class SynthesisProvider(Protocol):
    name: str

    async def generate(self, prompt: str, genre: str) -> ReadyOutcome: ...


class SunoProvider:
    name = "suno"

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        duration: int | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.base_url = (base_url or settings.SUNO_API_BASE).rstrip("/")
        self.duration = duration or settings.SUNO_REQUEST_DURATION
        self.timeout = timeout or settings.SUNO_TIMEOUT_SECONDS
        self._transport = transport

    async def generate(self, prompt: str, genre: str) -> ReadyOutcome:
        body = SunoGenerateRequest(prompt=prompt, duration=self.duration)
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout),
            transport=self._transport,
        ) as client:
            try:
                response = await client.post("/generate", json=body.model_dump(), headers=headers)
            except httpx.HTTPError as e:
                raise ProviderError(f"Suno API unreachable: {e}") from e

        if not response.is_success:
            raise ProviderError(
                f"Suno API error: {response.status_code} {response.reason_phrase}"
            )
        try:
            data = SunoGenerateResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise ProviderError(f"Suno API returned an unusable body: {e}") from e

        logger.info(f"[suno] generated job={data.id} duration={data.duration}")
        return data.to_outcome()


class DemoProvider:
    """Waits a fixed interval and hands back a royalty-free sample for the genre."""

    name = "demo"

    def __init__(self, delay: float | None = None, duration: int | None = None):
        self.delay = settings.DEMO_DELAY_SECONDS if delay is None else delay
        self.duration = duration or settings.DEMO_DURATION

    async def generate(self, prompt: str, genre: str) -> ReadyOutcome:
        await asyncio.sleep(self.delay)
        return ReadyOutcome(audio_url=demo_audio_url(genre), duration=self.duration)


def get_provider() -> SynthesisProvider:
    if settings.SUNO_API_KEY:
        return SunoProvider(settings.SUNO_API_KEY)
    return DemoProvider()
