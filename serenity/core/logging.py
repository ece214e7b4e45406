import logging

from serenity.core.config import settings

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

logger = logging.getLogger("serenity")


def configure_logging(level: str | None = None) -> None:
    """루트 로거에 핸들러가 없을 때만 기본 설정"""
    level = (level or settings.LOG_LEVEL).upper()
    if not logging.getLogger().handlers:
        logging.basicConfig(level=level, format=_FORMAT)
    logger.setLevel(level)


configure_logging()
