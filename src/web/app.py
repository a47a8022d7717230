"""
FastAPI application factory for the banknote reader status API.

Routes:
- /api/detection -> currently tracked note
- /api/status -> runtime status and session counters
"""

from __future__ import annotations

from fastapi import FastAPI

from .routes import api


def create_app() -> FastAPI:
    """Create the FastAPI app and wire routes."""
    app = FastAPI(
        title="Banknote Reader",
        version="0.1.0",
        description="Live banknote recognition status",
    )
    app.include_router(api.router, prefix="/api")
    return app
