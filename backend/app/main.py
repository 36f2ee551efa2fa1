"""
Q&A Forum Application.

FastAPI application serving the forum pages, the comment
widgets and a JSON API.
"""

import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from loguru import logger

from app.api import pages, widgets
from app.api.v1 import router as api_v1_router
from app.core.config import settings
from app.core.database import async_session, close_db, init_db
from app.core.exceptions import ForumError, ValidationError
from app.core.templates import render_template
from app.modules.forum.seed import seed_if_empty


def configure_logging() -> None:
    """Send loguru output to stderr at the configured level."""
    logger.remove()
    logger.add(sys.stderr, level=settings.log_level.upper())


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    configure_logging()
    logger.info("Starting Q&A Forum...")

    # Initialize database
    await init_db()
    logger.info("Database initialized")

    if settings.seed_on_startup:
        async with async_session() as db:
            if await seed_if_empty(db):
                await db.commit()
                logger.info("Demo data seeded")

    logger.info("Q&A Forum started successfully")

    yield

    # Shutdown
    logger.info("Shutting down Q&A Forum...")

    # Close database
    await close_db()

    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Q&A Forum

    ## Features

    - **Questions**: Listing and detail pages grouped by category
    - **Answers**: Posted from the question page
    - **Comments**: On questions and answers, via reactive widgets
    - **API**: JSON API with OpenAPI documentation
    """,
    openapi_url=f"{settings.api_v1_prefix}/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc",
    default_response_class=ORJSONResponse,
    debug=settings.debug,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ForumError)
async def forum_error_handler(request: Request, exc: ForumError):
    """Render forum errors as JSON for the API and as a page otherwise."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.debug(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")

    if request.url.path.startswith(settings.api_v1_prefix):
        content = {"detail": exc.message}
        if isinstance(exc, ValidationError):
            content["field"] = exc.field
        return ORJSONResponse(status_code=exc.status_code, content=content)

    return render_template(
        request,
        "errors/error.html",
        {"status_code": exc.status_code, "message": exc.message},
        status_code=exc.status_code,
    )


# Include routers
app.include_router(api_v1_router, prefix=settings.api_v1_prefix)
app.include_router(widgets.router, prefix="/widgets/comments", tags=["Widgets"])
app.include_router(pages.router, tags=["Pages"])


@app.get("/health", tags=["System"])
async def health_check() -> dict:
    """Health check endpoint for monitoring."""
    return {
        "status": "healthy",
        "version": settings.app_version,
    }
