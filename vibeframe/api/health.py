"""Health check + meta endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from vibeframe import __version__
from vibeframe.dependencies import get_orchestrator
from vibeframe.engine.orchestrator import GenerationOrchestrator
from vibeframe.models.responses import HealthResponse
from vibeframe.workflow.catalog import catalog_versions

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=__version__,
        catalogs=catalog_versions(),
    )


@router.get("/prompts")
async def prompts(orchestrator: GenerationOrchestrator = Depends(get_orchestrator)) -> dict[str, object]:
    return orchestrator.prompt_config.as_dict()
