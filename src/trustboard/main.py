# src/trustboard/main.py
"""Main entry point for the Trustboard application."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from trustboard.api.v1 import feedback_router, moderation_router, system_router
from trustboard.core.settings import settings
from trustboard.db.session import create_tables
from trustboard.services.email_notifier import get_email_notifier
from trustboard.services.gemini import get_gemini_client

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Trustboard API",
    description="Moderated feedback collection API",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(feedback_router, prefix="/api/v1")
app.include_router(moderation_router, prefix="/api/v1")
app.include_router(system_router, prefix="/api/v1")


@app.on_event("startup")
async def on_startup() -> None:
    logger.info("Environment: %s", settings.environment)
    if settings.is_test:
        return

    create_tables()
    logger.info("Database ready")

    if settings.email_configured:
        # Logged only; email trouble must not keep the service from accepting feedback.
        await get_email_notifier().verify_connection()
    else:
        logger.warning("EMAIL_HOST not set; feedback notifications are disabled")

    if not settings.gemini_configured:
        logger.warning("GEMINI_API_KEY not set; moderation runs rule-based only")


@app.on_event("shutdown")
async def on_shutdown() -> None:
    await get_gemini_client().aclose()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": "Trustboard API",
        "version": settings.app_version,
        "description": "Moderated feedback collection API",
        "docs": "/docs",
        "redoc": "/redoc"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("trustboard.main:app", host="0.0.0.0", port=settings.port, reload=settings.debug)
