"""Block routes — the palette and block type definitions."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from backend.services.kernel import get_registry
from blockcanvas.kernel.presets import PRESETS
from blockcanvas.kernel.registry import ComponentRegistry
from blockcanvas.kernel.types import NotFound

router = APIRouter(prefix="/api", tags=["blocks"])


@router.get("/blocks")
async def list_blocks(registry: ComponentRegistry = Depends(get_registry)) -> dict[str, Any]:
    """Palette entries in registry order, plus the available style presets."""
    return {
        "blocks": registry.palette(),
        "presets": [p.to_dict() for p in PRESETS.values()],
    }


@router.get("/blocks/{type_key}")
async def get_block(type_key: str, registry: ComponentRegistry = Depends(get_registry)) -> dict[str, Any]:
    """Full definition of one block type, property schema included."""
    try:
        return registry.get(type_key).to_dict()
    except NotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Block type not found.") from None
