"""Compile and export routes — turn a set of instances into static site code."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from backend.models.layout import CompileRequest, CompileResponse, CompileWarningModel
from backend.services.kernel import get_registry
from blockcanvas.kernel.compiler import CompiledDocument, compile_layout
from blockcanvas.kernel.export import ExportBundle
from blockcanvas.kernel.registry import ComponentRegistry

router = APIRouter(prefix="/api", tags=["compile"])


def _compile(req: CompileRequest, registry: ComponentRegistry) -> CompiledDocument:
    return compile_layout(registry, [i.to_instance() for i in req.instances], req.to_options())


@router.post("/compile")
async def compile_site(
    req: CompileRequest,
    registry: ComponentRegistry = Depends(get_registry),
) -> CompileResponse:
    """
    Compile instances into markup, stylesheet and script.
    Never fails for a bad block; problems come back in `warnings`.
    """
    doc = _compile(req, registry)
    return CompileResponse(
        markup=doc.markup,
        stylesheet=doc.stylesheet,
        script=doc.script,
        standalone=doc.standalone(),
        warnings=[
            CompileWarningModel(code=w.code, message=w.message, instanceId=w.instance_id)
            for w in doc.warnings
        ],
    )


@router.post("/export")
async def export_site(
    req: CompileRequest,
    registry: ComponentRegistry = Depends(get_registry),
) -> Response:
    """index.html, styles.css and script.js as one zip download."""
    bundle = ExportBundle.from_document(_compile(req, registry))
    return Response(
        content=bundle.to_zip(),
        media_type="application/zip",
        headers={"Content-Disposition": 'attachment; filename="website.zip"'},
    )
