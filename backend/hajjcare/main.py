"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from hajjcare.config import settings
from hajjcare.database import init_db
from hajjcare.dependencies import get_background_sync
from hajjcare.routes import profile, shared

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events for startup/shutdown."""
    # Startup: make sure the profile document table exists
    try:
        await init_db()
        logger.info("Profile store initialized")
    except Exception as e:
        logger.warning("Profile store not available - continuing without it: %s", e)

    yield  # Application runs here

    # Shutdown: let in-flight best-effort syncs finish
    await get_background_sync().drain()


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        # Prevent clickjacking
        response.headers["X-Frame-Options"] = "DENY"
        # Prevent MIME type sniffing
        response.headers["X-Content-Type-Options"] = "nosniff"
        # Shared links must not leak embedded profile data to third parties
        response.headers["Referrer-Policy"] = "no-referrer"
        # Medical data must not be cached by intermediaries
        response.headers["Cache-Control"] = "no-store"
        return response


app = FastAPI(
    title="Hajj Care",
    description="Pilgrim medical profiles with shareable emergency links",
    version="0.1.0",
    lifespan=lifespan,
)

# Security headers middleware (applied to all responses)
app.add_middleware(SecurityHeadersMiddleware)

# CORS middleware for frontend
# Parse comma-separated origins from config
_cors_origins = [origin.strip() for origin in settings.cors_origins.split(",") if origin.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT"],
    allow_headers=["X-Security-Code", "Content-Type"],
)

# Include API routers
app.include_router(profile.router, prefix="/api")
app.include_router(shared.router)


@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/")
async def root() -> dict:
    """Root endpoint with API info."""
    return {
        "name": "Hajj Care API",
        "version": "0.1.0",
        "docs": "/docs",
    }
