"""Generate route — prompt → starter layout."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from backend import config
from backend.models.layout import GenerateRequest, GenerateResponse
from backend.services.kernel import get_generator, get_registry
from blockcanvas.kernel.generator import StructureGenerator, generate_into
from blockcanvas.kernel.registry import ComponentRegistry
from blockcanvas.kernel.store import InstanceStore
from blockcanvas.kernel.types import GeneratorError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["generate"])


@router.post("/generate")
async def generate_layout(
    req: GenerateRequest,
    registry: ComponentRegistry = Depends(get_registry),
    generator: StructureGenerator = Depends(get_generator),
) -> GenerateResponse:
    """
    Ask the structure generator for a starter list and return it as an
    unsaved layout. The client saves it once the user keeps it.
    """
    store = InstanceStore(req.canvas_id)
    try:
        result = await generate_into(
            generator,
            store,
            registry,
            req.prompt,
            req.preset,
            timeout=config.settings.GENERATOR_TIMEOUT_SECONDS,
        )
    except GeneratorError as e:
        logger.warning("generate: %s", e)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)) from e

    return GenerateResponse(
        layout=store.to_layout().to_dict(),
        added=result.added,
        skipped=result.skipped,
    )
