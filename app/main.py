"""Main FastAPI application."""

import os
from contextlib import asynccontextmanager

import structlog
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.deps import get_cache_manager
from app.api.v1 import api_router
from app.config import settings
from app.core.cache import CacheManager
from app.core.exceptions import ApplicationError
from app.core.logging import setup_logging, setup_sentry
from app.db.session import engine, init_db

setup_logging()
logger = structlog.get_logger(__name__)

if not setup_sentry():
    logger.warning("sentry_disabled", reason="SENTRY_DSN not configured")


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    logger.info("application_started", environment=settings.ENVIRONMENT, storage=settings.STORAGE_TYPE)
    yield
    await get_cache_manager().disconnect()
    await engine.dispose()
    logger.info("application_stopped")


def _error_body(message) -> dict:
    return {"success": False, "message": message}


def register_exception_handlers(app: FastAPI) -> None:
    """Every error leaves the API as {"success": false, "message": ...}."""

    @app.exception_handler(ApplicationError)
    async def application_error_handler(request: Request, exc: ApplicationError):
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.detail),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error("unhandled_exception", path=request.url.path, error=str(exc), exc_info=exc)
        return JSONResponse(
            status_code=500,
            content=_error_body(str(exc) if settings.DEBUG else "An error occurred"),
        )


def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Job portal API: job applications with qualification checks and ATS scoring",
        lifespan=lifespan,
        swagger_ui_parameters={"persistAuthorization": True},
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.include_router(api_router, prefix="/api/v1")

    # Uploaded documents are served by the app itself only on local storage
    if settings.STORAGE_TYPE.lower() == "local":
        os.makedirs(settings.LOCAL_STORAGE_DIR, exist_ok=True)
        application.mount(
            settings.LOCAL_STORAGE_BASE_URL,
            StaticFiles(directory=settings.LOCAL_STORAGE_DIR),
            name="uploads",
        )

    @application.get("/", tags=["Health"])
    async def root():
        return {"message": settings.APP_NAME, "version": settings.APP_VERSION, "status": "operational"}

    @application.get("/health", tags=["Health"])
    async def health_check(cache: CacheManager = Depends(get_cache_manager)):
        """Liveness plus Redis reachability (OTP codes and rate limits live there)."""
        cache_healthy = await cache.is_healthy()
        return {
            "status": "healthy" if cache_healthy else "degraded",
            "environment": settings.ENVIRONMENT,
            "cache": {"healthy": cache_healthy},
        }

    register_exception_handlers(application)
    return application


app = create_app()
