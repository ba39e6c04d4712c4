from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.chat import router as chat_router
from src.api.health import router as health_router
from src.api.recommend import router as recommend_router
from src.api.schools import router as schools_router
from src.config import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Ensure the data directory, SQLite database, and tables exist on startup."""
    settings = get_settings()
    db_path = Path(settings.SQLITE_PATH)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    from src.db.sqlite_repo import SQLiteSchoolRepository

    repo = SQLiteSchoolRepository(settings.SQLITE_PATH)
    await repo.init_db()
    await repo.engine.dispose()
    logger.info("Database ready at %s; pinned schools: %s", db_path, settings.pinned_schools())

    yield


app = FastAPI(
    title="Zim School Finder API",
    description="API for discovering and comparing private schools in Zimbabwe",
    version="0.1.0",
    lifespan=lifespan,
)

_settings = get_settings()
_cors_origins = [o.strip() for o in _settings.CORS_ORIGINS.split(",") if o.strip()] if _settings.CORS_ORIGINS else []
if _cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(health_router)
app.include_router(recommend_router)
app.include_router(schools_router)
app.include_router(chat_router)


if __name__ == "__main__":
    logging.basicConfig(
        level=_settings.LOG_LEVEL.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    uvicorn.run("src.main:app", host="0.0.0.0", port=8000, reload=True)
