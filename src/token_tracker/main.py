# src/token_tracker/main.py
"""Main entry point for the Token Tracker application."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from token_tracker.api.v1 import token_data_router, users_router
from token_tracker.core.settings import settings
from token_tracker.db.session import create_tables

# Initialize FastAPI app
app = FastAPI(
    title="Token Tracker API",
    description="Per-user token counts recorded against a fixed daily slot grid",
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
app.include_router(token_data_router, prefix="/api/v1")
app.include_router(users_router, prefix="/api/v1")


@app.on_event("startup")
async def on_startup() -> None:
    if settings.auto_create_tables:
        create_tables()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/api/v1")
async def api_status() -> dict[str, str]:
    """Report that the versioned API is reachable."""
    return {"status": "OK", "message": "Token Tracker API is running"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("token_tracker.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
