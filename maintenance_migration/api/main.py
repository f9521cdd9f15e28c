"""FastAPI application entry point."""

import os
from typing import List, Optional, Sequence

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from .routes import migrations

CORS_ORIGINS_ENV = "MIGRATION_API_CORS_ORIGINS"


def cors_origins_from_env() -> List[str]:
    """Comma separated origins from MIGRATION_API_CORS_ORIGINS."""
    value = os.environ.get(CORS_ORIGINS_ENV, "")
    return [o.strip() for o in value.split(",") if o.strip()]


def create_app(cors_origins: Optional[Sequence[str]] = None) -> FastAPI:
    app = FastAPI(
        title="Maintenance Migration API",
        description="Progress, reports and runs of the maintenance plan migration",
        version=__version__,
    )

    # Browser clients only when origins are configured
    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(cors_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # Include routers
    app.include_router(migrations.router, prefix="/api/migrations", tags=["migrations"])

    @app.get("/api/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app(cors_origins_from_env())
