"""Diagram API routes.

  GET  /cases       → JSON case listing
  GET  /usecases    → use case diagram
  GET  /sequence    → sequence diagram for ?case= (404 when unknown)
  GET  /components  → component diagram for ?case= or the whole system
  GET  /all         → every diagram, separated by blank lines
  POST /reload      → rebuild the snapshot from the configured sources
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse

from ..deps import get_diagram_service, get_scale, get_snapshot_holder
from ..schemas import CaseResponse, ReloadResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["diagrams"])


@router.get("/cases", response_model=List[CaseResponse], response_model_exclude_none=True)
async def list_cases(diagram_service=Depends(get_diagram_service)):
    """List every case in declaration order."""
    return [
        CaseResponse(name=case.name, text=case.text)
        for case in diagram_service.list_cases()
    ]


@router.get("/usecases", response_class=PlainTextResponse)
async def get_use_cases(diagram_service=Depends(get_diagram_service)):
    return diagram_service.render_use_cases()


@router.get("/sequence", response_class=PlainTextResponse)
async def get_sequence(
    case: Optional[str] = None,
    scale: Optional[float] = Depends(get_scale),
    diagram_service=Depends(get_diagram_service),
):
    """Sequence diagram for one case."""
    puml = diagram_service.render_sequence(case, scale)
    if puml is None:
        raise HTTPException(status_code=404, detail=f"Case not found: {case}")
    return puml


@router.get("/components", response_class=PlainTextResponse)
async def get_components(
    case: Optional[str] = None,
    scale: Optional[float] = Depends(get_scale),
    diagram_service=Depends(get_diagram_service),
):
    """Component diagram for one case, or for every case when none is given."""
    puml = diagram_service.render_components(case, scale)
    if puml is None:
        raise HTTPException(status_code=404, detail="No cases in scope")
    return puml


@router.get("/all", response_class=PlainTextResponse)
async def get_all(diagram_service=Depends(get_diagram_service)):
    return diagram_service.render_all()


@router.post("/reload", response_model=ReloadResponse)
def reload_snapshot(holder=Depends(get_snapshot_holder)):
    """Re-extract annotations and swap in the new snapshot.

    Sync route: FastAPI runs it in the threadpool.
    """
    graph = holder.reload()
    logger.info("Snapshot reloaded via API")
    return ReloadResponse(**graph.stats())
