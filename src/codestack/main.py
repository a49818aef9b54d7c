from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.codestack.api.middlewares import setup_middlewares
from src.codestack.api.v1.router import api_router
from src.codestack.core.config import get_settings
from src.codestack.core.db import dispose_engine
from src.codestack.core.exceptions import setup_exception_handlers
from src.codestack.core.health import setup_health_endpoint, setup_metrics
from src.codestack.core.logging import get_logger, setup_logging
from src.codestack.core.rate_limit import limiter
from src.codestack.core.redis import close_redis

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan - startup and shutdown."""
    settings = get_settings()
    setup_logging(settings.debug)
    logger.info(f"Starting {settings.app_name}", app_env=settings.app_env)

    yield

    logger.info("Closing connections...")
    await close_redis()
    await dispose_engine()
    logger.info("Shutdown complete")


OPENAPI_TAGS = [
    {"name": "snippets", "description": "Create, browse, update and delete code snippets"},
    {"name": "meta", "description": "Languages, tags, API index and health"},
]


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description=(
            "Share short code snippets without an account. Each snippet is "
            "guarded by the modification code returned when it is created."
        ),
        version="0.1.0",
        openapi_tags=OPENAPI_TAGS,
        lifespan=lifespan,
        docs_url="/docs" if settings.enable_openapi else None,
        redoc_url="/redoc" if settings.enable_openapi else None,
        openapi_url="/openapi.json" if settings.enable_openapi else None,
    )

    setup_exception_handlers(app)

    app.state.limiter = limiter

    setup_middlewares(app, settings)

    app.include_router(api_router)

    setup_metrics(app)
    setup_health_endpoint(app)

    return app


app = create_app()
