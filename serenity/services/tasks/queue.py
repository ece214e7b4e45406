from __future__ import annotations

import asyncio
from functools import lru_cache
from typing import Set

from redis import Redis
from rq import Queue

from serenity.core.config import settings
from serenity.core.logging import logger

# inline 백엔드: 태스크 참조 유지 (GC 방지)
_inflight: Set[asyncio.Task] = set()


@lru_cache
def get_queue() -> Queue:
    return Queue(settings.RQ_QUEUE, connection=Redis.from_url(settings.REDIS_URL))


def _on_done(task: asyncio.Task) -> None:
    _inflight.discard(task)
    if task.cancelled():
        logger.warning(f"[queue] {task.get_name()} cancelled")
        return
    exc = task.exception()
    if exc is not None:
        # 트랙은 이미 failed 로 기록됨
        logger.error(f"[queue] {task.get_name()} finished with error: {exc!r}")


def spawn_generation(track_id: int, user_id: str, prompt: str, genre: str) -> asyncio.Task:
    # Import inside function to avoid import cycles
    from serenity.services.tasks.jobs import run_generation

    task = asyncio.get_running_loop().create_task(
        run_generation(track_id, user_id, prompt, genre),
        name=f"generate-track-{track_id}",
    )
    _inflight.add(task)
    task.add_done_callback(_on_done)
    return task


async def dispatch_generation(track_id: int, user_id: str, prompt: str, genre: str) -> str:
    """Start generation without waiting for it. Returns a job/task id."""
    if settings.GENERATION_BACKEND == "rq":
        from serenity.services.tasks.jobs import generate_track_job

        job = await asyncio.to_thread(
            get_queue().enqueue,
            generate_track_job,
            track_id,
            user_id,
            prompt,
            genre,
            job_timeout=settings.JOB_TIMEOUT_SECONDS,
            result_ttl=60 * 60,
            failure_ttl=24 * 60 * 60,
            description=f"generate track {track_id}",
        )
        logger.info(f"[queue] enqueued track={track_id} job={job.id}")
        return job.id

    task = spawn_generation(track_id, user_id, prompt, genre)
    logger.info(f"[queue] spawned track={track_id} task={task.get_name()}")
    return task.get_name()


async def drain() -> None:
    """Wait for in-flight inline generations (shutdown, tests)."""
    while _inflight:
        await asyncio.gather(*list(_inflight), return_exceptions=True)
