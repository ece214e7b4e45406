from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    APP_ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    REDIS_URL: str = "redis://localhost:6379/0"
    RQ_QUEUE: str = "generation"

    # "inline": asyncio task in the API process, "rq": RQ worker (worker.py)
    GENERATION_BACKEND: str = "inline"
    JOB_TIMEOUT_SECONDS: int = 60 * 10

    # "memory": single API process, "redis": required when generation runs on RQ
    CHANGE_FEED: str = "memory"

    SUNO_API_KEY: str | None = None
    SUNO_API_BASE: str = "https://api.suno.ai/v1"
    SUNO_REQUEST_DURATION: int = 60
    SUNO_TIMEOUT_SECONDS: float = 120.0

    DEMO_DELAY_SECONDS: float = 2.0
    DEMO_DURATION: int = 120

    ACCESS_TOKEN_SECRET: str = "change-me"
    ACCESS_TOKEN_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_HOURS: int = 24 * 30

    RECENT_PLAY_WINDOW: int = 10
    RECENT_PLAY_LIMIT: int = 5

    DELETE_RETRY_ATTEMPTS: int = 3

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
