"""
FastAPI application factory and configuration.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chat.core.config import get_settings
from chat.core.database import init_db
from chat.core.errors import ChatError
from chat.core.logging import setup_logging, get_logger
from chat.api import health, messages, metrics, users
from chat.api.metrics import MetricsMiddleware, set_startup_time


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger = get_logger(__name__)
    logger.info("Starting application...")

    init_db()
    logger.info("Database initialized")

    set_startup_time()

    yield

    logger.info("Shutting down application...")


async def chat_error_handler(request: Request, exc: ChatError) -> JSONResponse:
    """Turn a classified service error into its HTTP response."""
    logger = get_logger(__name__)
    context = {
        "extra_data": {
            "path": request.url.path,
            "error": type(exc).__name__,
            "status_code": exc.status_code,
        }
    }
    if exc.status_code >= 500:
        logger.error(exc.message, extra=context)
    else:
        logger.warning(exc.message, extra=context)

    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    setup_logging()
    logger = get_logger(__name__)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Message exchange service for text, image and video messages",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(MetricsMiddleware)

    app.add_exception_handler(ChatError, chat_error_handler)

    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(messages.router)
    app.include_router(metrics.router)

    logger.info(
        "Application created",
        extra={
            "extra_data": {
                "app_name": settings.app_name,
                "version": settings.app_version,
                "debug": settings.debug,
            }
        }
    )

    return app


# Create the application instance
app = create_app()
