"""FastAPI application factory.

Main entry point for the Cosmos Reader Web API.
"""

import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cosmos import __version__
from cosmos.config import load_app_config
from cosmos.db import init_db
from cosmos.db.database import get_db_path
from cosmos.web.routes import (
    achievements_router,
    assistant_router,
    books_router,
    glossary_router,
    health_router,
    keywords_router,
    leaderboard_router,
    progress_router,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup/shutdown events."""
    if not app.state.db_ready:
        init_db(Path(os.environ.get("COSMOS_DB") or load_app_config().reader.db_path))
        app.state.db_ready = True
    logger.info("api_startup", db_path=str(get_db_path().absolute()))
    yield


def create_app(db_path: Path | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        db_path: Database to initialize immediately. When omitted the
            database named by COSMOS_DB, or the configured
            reader.db_path, is initialized at startup.

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="Cosmos Reader API",
        description="Library, glossary and gamification API for Cosmos Reader",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.db_ready = False
    if db_path is not None:
        init_db(db_path)
        app.state.db_ready = True

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(books_router)
    app.include_router(progress_router)
    app.include_router(glossary_router)
    app.include_router(keywords_router)
    app.include_router(achievements_router)
    app.include_router(leaderboard_router)
    app.include_router(assistant_router)

    return app


# Default app instance for uvicorn
app = create_app()
