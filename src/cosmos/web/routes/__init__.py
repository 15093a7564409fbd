"""Route handlers for Web API."""

from cosmos.web.routes.achievements import router as achievements_router
from cosmos.web.routes.assistant import router as assistant_router
from cosmos.web.routes.books import router as books_router
from cosmos.web.routes.glossary import router as glossary_router
from cosmos.web.routes.health import router as health_router
from cosmos.web.routes.keywords import router as keywords_router
from cosmos.web.routes.leaderboard import router as leaderboard_router
from cosmos.web.routes.progress import router as progress_router

__all__ = [
    "achievements_router",
    "assistant_router",
    "books_router",
    "glossary_router",
    "health_router",
    "keywords_router",
    "leaderboard_router",
    "progress_router",
]
