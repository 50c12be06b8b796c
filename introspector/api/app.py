"""FastAPI application factory for Introspector.

Creates the FastAPI app and registers the diagram routes under the
configured base path.
"""

import logging
from typing import Optional

from fastapi import FastAPI

from .. import __version__
from ..core.config import Settings, get_settings
from ..core.graph import SnapshotHolder
from .schemas import HealthResponse

logger = logging.getLogger(__name__)


def _normalize_base_path(base_path: Optional[str]) -> str:
    """Leading slash, no trailing slash; empty for the root."""
    stripped = (base_path or "").strip().strip("/")
    return f"/{stripped}" if stripped else ""


def create_app(holder: SnapshotHolder, settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        holder: SnapshotHolder with the live ElementGraph
        settings: Settings instance (the process-wide get_settings() when omitted)

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Introspector API",
        description="PlantUML diagrams from source annotations",
        version=__version__,
    )

    # Store shared dependencies on app state
    app.state.snapshot_holder = holder
    app.state.settings = settings
    app.state.diagram_service = None

    from .routes.diagrams import router as diagrams_router

    prefix = _normalize_base_path(settings.base_path)
    app.include_router(diagrams_router, prefix=prefix)

    @app.get(f"{prefix}/health", response_model=HealthResponse)
    async def health_check():
        return HealthResponse(status="ok")

    logger.info("FastAPI app created with routes under %r", prefix or "/")
    return app
