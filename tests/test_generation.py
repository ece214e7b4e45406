import asyncio
import json
import time

import httpx
import pytest

from conftest import USER
from serenity.core.errors import ProviderError
from serenity.db.models import Track, TrackStatus
from serenity.schemas.generation import ReadyOutcome
from serenity.services.generation import prompts
from serenity.services.generation.provider import DemoProvider, SunoProvider, get_provider
from serenity.services.library import tracks
from serenity.services.tasks.jobs import run_generation


def test_enrich_prompt_appends_genre_descriptor():
    assert prompts.enrich_prompt("rainy cafe", "lofi") == (
        "rainy cafe, lo-fi hip hop, chill beats, relaxing study music"
    )
    assert prompts.enrich_prompt("late night", "jazz").endswith("relaxing jazz melody")


def test_unknown_genre_falls_back_to_ambient():
    assert prompts.enrich_prompt("x", "vaporwave") == (
        "x, ambient, atmospheric, ethereal, meditation music"
    )
    assert prompts.demo_audio_url("vaporwave") == prompts.DEMO_AUDIO_URLS["ambient"]


def test_get_provider_switches_on_credential(test_settings, monkeypatch):
    assert isinstance(get_provider(), DemoProvider)
    monkeypatch.setattr(test_settings, "SUNO_API_KEY", "sk-test")
    provider = get_provider()
    assert isinstance(provider, SunoProvider)
    assert provider.api_key == "sk-test"


async def test_demo_scenario_study_session(db, db_manager):
    track = await tracks.create_track(db, USER, "Study Session", "rainy cafe", "lofi")
    tid = track.id

    started = time.monotonic()
    await run_generation(
        tid, USER, track.prompt, track.genre,
        session_factory=db_manager.session_factory,
        provider=DemoProvider(delay=0.05),
    )
    assert time.monotonic() - started < 2.0

    db.expire_all()
    done = await tracks.get_track(db, USER, tid)
    assert done.status == TrackStatus.ready
    assert done.audio_url == prompts.DEMO_AUDIO_URLS["lofi"]
    assert done.duration == 120
    assert done.image_url is None


async def test_unknown_genre_still_completes_with_ambient_asset(db, db_manager):
    # bypasses creation-time validation on purpose
    track = Track(user_id=USER, title="Drift", prompt="neon", genre="vaporwave", status=TrackStatus.pending)
    db.add(track)
    await db.commit()
    tid = track.id

    await run_generation(
        tid, USER, "neon", "vaporwave",
        session_factory=db_manager.session_factory,
        provider=DemoProvider(delay=0),
    )
    db.expire_all()
    done = await tracks.get_track(db, USER, tid)
    assert done.status == TrackStatus.ready
    assert done.audio_url == prompts.DEMO_AUDIO_URLS["ambient"]


class _RecordingProvider:
    name = "recording"

    def __init__(self, session_factory, track_id, fail=False):
        self.session_factory = session_factory
        self.track_id = track_id
        self.fail = fail
        self.status_seen = None
        self.prompt_seen = None

    async def generate(self, prompt, genre):
        async with self.session_factory() as s:
            self.status_seen = (await s.get(Track, self.track_id)).status
        self.prompt_seen = prompt
        if self.fail:
            raise ProviderError("Suno API error: 500 Internal Server Error")
        return ReadyOutcome(audio_url="https://cdn.example/x.mp3", image_url="https://cdn.example/x.png",
                            provider_job_id="job-1", duration=61.0)


async def test_generating_is_committed_before_provider_call(db, db_manager):
    track = await tracks.create_track(db, USER, "T", "ocean", "classical")
    tid = track.id
    provider = _RecordingProvider(db_manager.session_factory, tid)

    await run_generation(tid, USER, "ocean", "classical",
                         session_factory=db_manager.session_factory, provider=provider)

    assert provider.status_seen == TrackStatus.generating
    assert provider.prompt_seen == "ocean, classical piano, calming orchestra, serene strings"
    db.expire_all()
    done = await tracks.get_track(db, USER, tid)
    assert (done.status, done.provider_job_id, done.duration) == (TrackStatus.ready, "job-1", 61.0)


async def test_provider_failure_marks_track_failed_and_reraises(db, db_manager, caplog):
    track = await tracks.create_track(db, USER, "T", "ocean", "jazz")
    tid = track.id
    provider = _RecordingProvider(db_manager.session_factory, tid, fail=True)

    with pytest.raises(ProviderError):
        await run_generation(tid, USER, "ocean", "jazz",
                             session_factory=db_manager.session_factory, provider=provider)

    db.expire_all()
    failed = await tracks.get_track(db, USER, tid)
    assert failed.status == TrackStatus.failed
    assert failed.audio_url is None
    assert "run_generation FAILED" in caplog.text


# ------- Suno client -------
async def test_suno_success_maps_response():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={
            "audio_url": "https://cdn.suno/a.mp3",
            "image_url": "https://cdn.suno/a.png",
            "id": "suno-42",
            "duration": 58.2,
            "extra": "ignored",
        })

    provider = SunoProvider("sk-test", base_url="https://suno.test/v1",
                            transport=httpx.MockTransport(handler))
    outcome = await provider.generate("rain, lofi", "lofi")

    assert seen["url"] == "https://suno.test/v1/generate"
    assert seen["auth"] == "Bearer sk-test"
    assert seen["body"] == {"prompt": "rain, lofi", "duration": 60, "make_instrumental": True}
    assert outcome == ReadyOutcome(audio_url="https://cdn.suno/a.mp3", image_url="https://cdn.suno/a.png",
                                   provider_job_id="suno-42", duration=58.2)


@pytest.mark.parametrize("status", [400, 401, 429, 500, 503])
async def test_suno_non_success_status_is_provider_error(status):
    provider = SunoProvider("sk-test", base_url="https://suno.test/v1",
                            transport=httpx.MockTransport(lambda r: httpx.Response(status)))
    with pytest.raises(ProviderError):
        await provider.generate("p", "jazz")


async def test_suno_unusable_body_is_provider_error():
    provider = SunoProvider("sk-test", base_url="https://suno.test/v1",
                            transport=httpx.MockTransport(lambda r: httpx.Response(200, json={"id": "x"})))
    with pytest.raises(ProviderError):
        await provider.generate("p", "jazz")


async def test_suno_transport_failure_is_provider_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    provider = SunoProvider("sk-test", base_url="https://suno.test/v1",
                            transport=httpx.MockTransport(handler))
    with pytest.raises(ProviderError):
        await provider.generate("p", "jazz")


async def test_demo_provider_waits_its_delay():
    provider = DemoProvider(delay=0.05, duration=120)
    started = asyncio.get_running_loop().time()
    outcome = await provider.generate("p", "classical")
    assert asyncio.get_running_loop().time() - started >= 0.04
    assert outcome.audio_url == prompts.DEMO_AUDIO_URLS["classical"]
    assert outcome.duration == 120
