"""Layout routes — load, save and delete a canvas's layout document."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from backend.models.layout import SaveLayoutRequest, SaveLayoutResponse
from backend.services.kernel import get_assembly
from blockcanvas.kernel.assembly import LayoutAssembly
from blockcanvas.kernel.store import InstanceStore
from blockcanvas.kernel.types import InvalidLayout, Layout, NotFound, PersistenceError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/layouts", tags=["layouts"])


@router.get("/{canvas_id}")
async def get_layout(canvas_id: str, assembly: LayoutAssembly = Depends(get_assembly)) -> dict[str, Any]:
    """The stored layout document for a canvas."""
    try:
        layout = await assembly.load(canvas_id)
    except NotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Layout not found.") from None
    except PersistenceError as e:
        logger.warning("layouts: load %s failed: %s", canvas_id, e)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)) from e
    return layout.to_dict()


@router.put("/{canvas_id}")
async def save_layout(
    canvas_id: str,
    req: SaveLayoutRequest,
    assembly: LayoutAssembly = Depends(get_assembly),
) -> SaveLayoutResponse:
    """
    Replace a canvas's layout with the submitted instances.

    The path's canvas id wins over any `canvasId` in the body; `savedAt` is
    stamped by the server.
    """
    store = InstanceStore(canvas_id)
    try:
        store.load(Layout(canvas_id=canvas_id, instances=[i.to_instance() for i in req.instances]))
    except InvalidLayout as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e

    try:
        result = await assembly.save(store)
    except PersistenceError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)) from e
    return SaveLayoutResponse(**result.to_dict())


@router.delete("/{canvas_id}", status_code=204)
async def delete_layout(canvas_id: str, assembly: LayoutAssembly = Depends(get_assembly)) -> None:
    try:
        await assembly.delete(canvas_id)
    except PersistenceError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)) from e
