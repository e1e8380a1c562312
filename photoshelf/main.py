"""
ASGI entry point: ``uvicorn photoshelf.main:app``.

Wires configuration, logging, middleware, the rate limiter, the API
routers and the static ``/uploads`` mount into one FastAPI application.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from slowapi.errors import RateLimitExceeded

from photoshelf import __version__
from photoshelf.api.endpoints import auth, health, images
from photoshelf.core.config import settings
from photoshelf.core.logging import setup_logging
from photoshelf.middleware.error_handler import ErrorHandlerMiddleware, setup_exception_handlers
from photoshelf.middleware.rate_limit import limiter, rate_limit_exceeded_handler
from photoshelf.services.database import init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Configure logging, create tables and the upload directory."""
    setup_logging()
    logger.info("Starting PhotoShelf API...")
    logger.info(f"Environment: {settings.APP_ENV}")
    logger.info(f"Debug mode: {settings.DEBUG}")

    (settings.upload_path / "thumbnails").mkdir(parents=True, exist_ok=True)
    await init_db()
    logger.info(f"Uploads stored in {settings.upload_path}")

    yield

    logger.info("Shutting down PhotoShelf API...")


def create_application() -> FastAPI:
    """Build the app; ``main.app`` is the instance uvicorn serves."""
    app = FastAPI(
        title="PhotoShelf API",
        description=(
            "Personal photo library: upload images, browse them with EXIF "
            "metadata and tags, and render non-destructive edits "
            "(brightness, contrast, saturation and crop)."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(ErrorHandlerMiddleware)
    setup_exception_handlers(app)

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    app.include_router(health.router)
    app.include_router(auth.router, prefix=settings.API_PREFIX)
    app.include_router(images.router, prefix=settings.API_PREFIX)

    # StaticFiles checks the directory when mounted
    settings.upload_path.mkdir(parents=True, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=settings.upload_path), name="uploads")

    return app


app = create_application()
