"""FastAPI dependencies for Introspector.

Provides shared objects (snapshot holder, diagram service) via FastAPI's
Depends() injection system.
"""

import logging
from typing import Optional

from fastapi import Query, Request

from ..core.diagrams import DiagramService
from ..core.utils import parse_float

logger = logging.getLogger(__name__)


async def get_snapshot_holder(request: Request):
    """Get SnapshotHolder from app state."""
    return request.app.state.snapshot_holder


async def get_diagram_service(request: Request):
    """Get or create DiagramService from app state."""
    if getattr(request.app.state, "diagram_service", None) is None:
        settings = request.app.state.settings
        request.app.state.diagram_service = DiagramService(
            request.app.state.snapshot_holder,
            package=settings.package if settings is not None else None,
        )
    return request.app.state.diagram_service


async def get_scale(scale: Optional[str] = Query(None, description="Hide components above this scale")) -> Optional[float]:
    """Lenient `scale` query parameter: anything but a float means no filter."""
    value = parse_float(scale)
    if scale is not None and value is None:
        logger.debug("Ignoring non-numeric scale %r", scale)
    return value
