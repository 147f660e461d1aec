"""
Pydantic models for blockcanvas.

All request/response shapes defined here. No imports from db or routes.
"""

from backend.models.layout import (
    CompileRequest,
    CompileResponse,
    CompileWarningModel,
    GenerateRequest,
    GenerateResponse,
    InstanceModel,
    PositionModel,
    SaveLayoutRequest,
    SaveLayoutResponse,
)

__all__ = [
    # Layout models
    "PositionModel",
    "InstanceModel",
    "SaveLayoutRequest",
    "SaveLayoutResponse",
    # Compile models
    "CompileRequest",
    "CompileResponse",
    "CompileWarningModel",
    # Generate models
    "GenerateRequest",
    "GenerateResponse",
]
