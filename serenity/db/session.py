from typing import Any, AsyncGenerator

from sqlalchemy import AsyncAdaptedQueuePool
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from serenity.core.logging import logger
from serenity.db.base import Base
from serenity.db.config import DatabaseSettings


class DatabaseManager:
    def __init__(self, url: str | None = None, **engine_kwargs: Any):
        settings = DatabaseSettings()
        self.url = url or settings.url
        kwargs: dict[str, Any] = {"echo": settings.DATABASE_ECHO}
        if self.url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
        else:
            kwargs.update(
                poolclass=AsyncAdaptedQueuePool,
                pool_recycle=28000,      # RDS wait_timeout 대비
                pool_pre_ping=True,      # 죽은 커넥션 사전 감지
            )
        kwargs.update(engine_kwargs)
        self.engine: AsyncEngine = create_async_engine(self.url, **kwargs)
        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def create_all(self) -> None:
        # 모델 등록 보장
        from serenity.db import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


# 앱 전역 (startup 에서 init_db)
_manager: DatabaseManager | None = None


async def init_db(url: str | None = None) -> DatabaseManager:
    global _manager
    _manager = DatabaseManager(url)
    await _manager.create_all()
    logger.info(f"[db] initialized url={_manager.url.split('@')[-1]}")
    return _manager


async def close_db() -> None:
    global _manager
    if _manager is not None:
        await _manager.dispose()
        _manager = None
        logger.info("[db] connection closed")


def set_manager(manager: DatabaseManager | None) -> None:
    """테스트/워커에서 전역 매니저 교체"""
    global _manager
    _manager = manager


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    if _manager is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return _manager.session_factory


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: 요청 스코프 세션"""
    async with get_session_factory()() as session:
        yield session
