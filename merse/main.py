import uvicorn
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from merse.api.core.exceptions.base import register_exception_handlers
from merse.api.core.middleware.logging import logging_middleware
from merse.api.router import api_router
from merse.database.connection import dispose_engine, get_session_factory
from merse.modules.billing.credits.usage import UsageRecorder
from merse.modules.orion.client import OrionEndpointClient
from merse.modules.rate_limit.backends import build_counter_backend
from merse.modules.rate_limit.local import FixedWindowRateLimiter, InMemoryRateStore
from merse.modules.rate_limit.tiered import TieredRateLimiter
from merse.utils.logger import setup_logging
from merse.utils.settings.app import AppSettings
from merse.utils.settings.redis import RedisSettings


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    settings = AppSettings()
    settings.validate_prod()
    redis_settings = RedisSettings()

    logger = setup_logging(settings.is_production)
    logger.info("Starting Merse credits API...")

    app.state.settings = settings
    app.state.redis_settings = redis_settings

    # Add session factory to app state
    app.state.session_factory = get_session_factory()
    logger.info("Database session factory added to app state")

    app.state.usage_recorder = UsageRecorder(
        app.state.session_factory, background=settings.USAGE_RECORDER_BACKGROUND
    )
    app.state.tiered_rate_limiter = TieredRateLimiter(
        build_counter_backend(redis_settings),
        window_seconds=redis_settings.RATE_LIMIT_WINDOW_SECONDS,
    )
    app.state.local_rate_limiter = FixedWindowRateLimiter(InMemoryRateStore())
    app.state.orion_client = OrionEndpointClient()

    yield

    # Shutdown
    logger.info("Shutting down Merse credits API...")
    await app.state.usage_recorder.drain()
    await app.state.tiered_rate_limiter.close()
    await dispose_engine()


app_settings = AppSettings()

app = FastAPI(
    title="Merse Credits API",
    description="Credit ledger, rate limiting and Orion Loop orchestration",
    version=app_settings.API_VERSION,
    lifespan=lifespan,
    # Security: Disable docs in production
    docs_url=None if app_settings.is_production else "/docs",
    redoc_url=None if app_settings.is_production else "/redoc",
    openapi_url=None if app_settings.is_production else "/openapi.json",
)

# Register global exception handlers
register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
)
app.middleware("http")(logging_middleware)

app.include_router(api_router)


def run_dev_server():
    """Run development server with auto-reload."""
    uvicorn.run(
        "merse.main:app", host="0.0.0.0", port=8010, reload=True, access_log=False
    )


def run_prod_server():
    """Run production server."""
    uvicorn.run(
        "merse.main:app", host="0.0.0.0", port=8010, reload=False, access_log=False
    )
