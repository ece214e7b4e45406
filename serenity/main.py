from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from serenity.api.routes.auth import router as auth_router
from serenity.api.routes.events import router as events_router
from serenity.api.routes.favorites import router as favorites_router
from serenity.api.routes.tracks import router as tracks_router
from serenity.core.config import settings
from serenity.core.errors import AuthenticationError, LibraryError
from serenity.core.logging import logger
from serenity.db.session import close_db, init_db
from serenity.services.tasks.queue import drain


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    logger.info(
        f"[main] startup env={settings.APP_ENV} generation={settings.GENERATION_BACKEND} "
        f"feed={settings.CHANGE_FEED} provider={'suno' if settings.SUNO_API_KEY else 'demo'}"
    )
    yield
    await drain()
    await close_db()


app = FastAPI(title="Serenity calming music API", lifespan=lifespan)


@app.exception_handler(LibraryError)
async def library_error_handler(request: Request, exc: LibraryError):
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=headers)


app.include_router(auth_router, prefix="/auth", tags=["auth"])
app.include_router(tracks_router, prefix="/tracks", tags=["tracks"])
app.include_router(favorites_router, prefix="/favorites", tags=["favorites"])
app.include_router(events_router, prefix="/events", tags=["events"])


@app.get("/health")
def health():
    return {"status": "ok", "env": settings.APP_ENV}
