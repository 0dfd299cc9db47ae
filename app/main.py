"""
Respond Hub - FastAPI Application Entry Point

Citizen emergency reporting with dispatch triage and agency response.

DESIGN PRINCIPLES:
- One in-memory lifecycle engine is the only writer of accounts and reports
- Every command is re-authorized at commit time
- Identity decisions cascade onto the citizen's reports immediately
- Advisory analysis is optional and never authoritative
"""

import logging
import sys
import traceback
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.core.errors import LifecycleError
from app.core.settings import settings
from app.routes import admin, auth, health, reports
from app.services.advisory import shutdown_advisory_gateway
from app.services.lifecycle_engine import get_lifecycle_engine


logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


# Initialize FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Emergency incident reporting, dispatch triage and identity verification",
    debug=settings.DEBUG
)


# Typed command failures → 403 / 404 / 409 / 422
@app.exception_handler(LifecycleError)
async def lifecycle_exception_handler(request: Request, exc: LifecycleError):
    """Surface command failures to the caller with a distinguishable error code."""
    logger.warning(f"{request.method} {request.url.path} rejected: {exc.error_code}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.error_code}
    )


# Global exception handler to catch ALL exceptions
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch all unhandled exceptions and log them with full traceback."""
    sys.stderr.write("=" * 80 + "\n")
    sys.stderr.write("🔥 GLOBAL EXCEPTION HANDLER CAUGHT EXCEPTION\n")
    sys.stderr.write(f"Path: {request.url.path}\n")
    sys.stderr.write(f"Method: {request.method}\n")
    sys.stderr.write("=" * 80 + "\n")
    sys.stderr.write("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))
    sys.stderr.write("=" * 80 + "\n")
    sys.stderr.flush()

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": f"Internal server error: {str(exc)}"}
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Application lifecycle events
@app.on_event("startup")
async def startup_event():
    """
    Initialize services on application startup.
    Currently: lifecycle engine (and demo staff accounts when enabled)
    """
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    engine = get_lifecycle_engine()
    logger.info(f"Lifecycle engine ready: {engine.stats()}")


@app.on_event("shutdown")
async def shutdown_event():
    """
    Cleanup on application shutdown: stops advisory worker threads.
    """
    logger.info(f"Shutting down {settings.APP_NAME}")
    shutdown_advisory_gateway()


# Include routers
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(reports.router)
app.include_router(admin.router)


# Root endpoint
@app.get("/")
async def root():
    """
    Root endpoint - API information.
    """
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "docs": "/docs",
        "health": "/health"
    }
