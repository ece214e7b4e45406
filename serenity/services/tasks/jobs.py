from __future__ import annotations

import asyncio
import time

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from serenity.core.logging import logger
from serenity.db.session import DatabaseManager, get_session_factory, set_manager
from serenity.schemas.generation import FailedOutcome
from serenity.services.events import reset_change_feed
from serenity.services.generation.prompts import enrich_prompt
from serenity.services.generation.provider import SynthesisProvider, get_provider
from serenity.services.library.tracks import begin_generation, complete_generation


async def run_generation(
    track_id: int,
    user_id: str,
    prompt: str,
    genre: str,
    *,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    provider: SynthesisProvider | None = None,
) -> None:
    """
    pending 트랙을 종료 상태(ready/failed)로 만드는 생성 잡.
    실패 시 트랙을 failed 로 기록한 뒤 예외를 다시 던진다 (잡 러너가 실패를 기록).
    """
    session_factory = session_factory or get_session_factory()
    provider = provider or get_provider()
    t0 = time.time()

    def dt() -> str:
        return f"{time.time() - t0:.2f}s"

    async with session_factory() as db:
        try:
            logger.info(f"[jobs] track={track_id} START provider={provider.name}")

            # 1) 상태 전이: pending -> generating (provider 호출 전에 커밋)
            await begin_generation(db, user_id, track_id)
            logger.info(f"[jobs] status=generating COMMIT ok total={dt()}")

            # 2) 장르 설명 추가
            enhanced = enrich_prompt(prompt, genre)
            logger.info(f"[jobs] prompt='{enhanced}'")

            # 3) 합성
            s = time.time()
            outcome = await provider.generate(enhanced, genre)
            logger.info(
                f"[jobs] provider DONE audio='{outcome.audio_url}' "
                f"dt={time.time()-s:.2f}s total={dt()}"
            )

            # 4) 완료
            await complete_generation(db, user_id, track_id, outcome)
            logger.info(f"[jobs] status=ready COMMIT ok track={track_id} TOTAL={dt()}")

        except Exception as e:
            logger.exception(f"[jobs] run_generation FAILED track={track_id}: {e} total={dt()}")
            try:
                await db.rollback()
                await complete_generation(db, user_id, track_id, FailedOutcome())
                logger.info(f"[jobs] status=failed COMMIT ok total={dt()}")
            except Exception:
                logger.exception(f"[jobs] failed to mark track={track_id} as failed")
            raise


def generate_track_job(track_id: int, user_id: str, prompt: str, genre: str) -> None:
    """RQ 워커에서 실행되는 '동기' 잡 함수. 잡마다 새 이벤트 루프와 엔진을 쓴다."""

    async def _main() -> None:
        manager = DatabaseManager()
        set_manager(manager)
        reset_change_feed()
        try:
            await run_generation(
                track_id, user_id, prompt, genre, session_factory=manager.session_factory
            )
        finally:
            set_manager(None)
            reset_change_feed()
            await manager.dispose()

    asyncio.run(_main())
