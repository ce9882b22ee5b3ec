import asyncio
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from .api.endpoints import health
from .api.router import api_router
from .config import Settings, get_settings
from .core.database import create_db_engine, create_session_factory, create_tables, verify_connection
from .core.logging import configure_logging
from .core.rate_limit import FixedWindowRateLimiter, RateLimitMiddleware
from .core.scheduler import CancellationToken, Scheduler
from .exceptions import InvalidCategory, PersistenceError, ValidationError
from .news.services.ingestion_service import build_orchestrator
from .news.services.news_service import NewsQueryService
from .repositories.content_repository import ContentRepository

logger = structlog.get_logger(__name__)


def init_state(app: FastAPI, settings: Settings) -> None:
    """Build the data layer and services once and share them through app.state"""
    engine = create_db_engine(settings.database_url, echo=settings.debug)
    verify_connection(engine)
    create_tables(engine)
    logger.info("Database tables created/verified")

    repository = ContentRepository(create_session_factory(engine))
    app.state.engine = engine
    app.state.repository = repository
    app.state.query_service = NewsQueryService(repository, max_page_size=settings.max_page_size)
    app.state.orchestrator = build_orchestrator(settings, repository)
    app.state.scheduler = Scheduler()
    app.state.cancellation_token = CancellationToken()


def start_background_ingestion(app: FastAPI, settings: Settings) -> Optional[asyncio.Task]:
    orchestrator = app.state.orchestrator
    scheduler = app.state.scheduler
    token = app.state.cancellation_token

    if settings.scheduler_enabled:
        scheduler.schedule_recurring(
            timedelta(hours=settings.refresh_interval_hours),
            lambda: orchestrator.run(trigger="scheduled"),
            token,
            name="ingestion",
        )

    if settings.ingest_on_startup:
        return asyncio.create_task(
            scheduler.trigger_now(lambda: orchestrator.run(trigger="startup"), token, name="ingestion")
        )
    return None


async def stop_background_ingestion(app: FastAPI, startup_run: Optional[asyncio.Task]) -> None:
    app.state.cancellation_token.cancel()
    await app.state.scheduler.shutdown()
    if startup_run is None:
        return

    if not startup_run.done():
        startup_run.cancel()
    try:
        await startup_run
    except asyncio.CancelledError:
        pass
    except Exception as e:
        logger.error("Startup ingestion run failed", error=str(e))


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    settings = app.state.settings
    configure_logging(settings)
    logger.info("Starting Tech News & Tips API", version="1.0.0")
    try:
        init_state(app, settings)
    except Exception as e:
        # No data layer, nothing to serve
        logger.error("Failed to initialize database", error=str(e))
        raise

    startup_run = start_background_ingestion(app, settings)

    yield

    logger.info("Shutting down Tech News & Tips API")
    await stop_background_ingestion(app, startup_run)
    app.state.engine.dispose()


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(InvalidCategory)
    async def invalid_category_handler(request: Request, exc: InvalidCategory):
        return JSONResponse(status_code=400, content={"message": "Invalid category"})

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=400, content={"message": str(exc)})

    @app.exception_handler(PersistenceError)
    async def persistence_error_handler(request: Request, exc: PersistenceError):
        logger.error("Store read failed", path=request.url.path, error=str(exc))
        label = "tips" if request.url.path.startswith("/api/tips") else "news"
        return JSONResponse(status_code=500, content={"message": f"Error fetching {label}"})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception occurred",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={"message": "An unexpected error occurred. Please try again later."}
        )


def create_application(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title="Tech News & Tips",
        description="Categorized technology news and community tips for Ghana, Africa and the world",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(GZipMiddleware, minimum_size=settings.gzip_minimum_size)
    app.add_middleware(
        RateLimitMiddleware,
        limiter=FixedWindowRateLimiter(settings.rate_limit_max_requests, settings.rate_limit_window_seconds),
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Liveness at root
    app.include_router(health.router, tags=["health"])
    app.include_router(api_router, prefix="/api")

    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "src.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level="info",
        access_log=False,
    )
