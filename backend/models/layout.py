"""Layout, compile and generate request/response models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from blockcanvas.kernel.types import BlockInstance, CompileOptions, Position

# Wire position values: CSS length string, bare pixel number, "auto", or null
LengthValue = str | float | None


class PositionModel(BaseModel):
    model_config = {"extra": "forbid"}

    top: LengthValue = None
    left: LengthValue = None
    width: LengthValue = None
    height: LengthValue = None

    def to_position(self) -> Position:
        return Position.from_dict(self.model_dump())


class InstanceModel(BaseModel):
    """One block instance as the editor client sends it."""

    model_config = {"extra": "forbid"}

    id: str = Field(min_length=1)
    type: str = Field(min_length=1)
    properties: dict[str, Any] = Field(default_factory=dict)
    position: PositionModel = Field(default_factory=PositionModel)

    def to_instance(self) -> BlockInstance:
        return BlockInstance(
            id=self.id,
            type=self.type,
            properties=dict(self.properties),
            position=self.position.to_position(),
        )


class SaveLayoutRequest(BaseModel):
    """What the client sends to PUT /api/layouts/{canvas_id}."""

    model_config = {"extra": "forbid", "populate_by_name": True}

    instances: list[InstanceModel] = Field(default_factory=list)
    canvas_id: str | None = Field(default=None, alias="canvasId")
    saved_at: int | None = Field(default=None, alias="savedAt")  # ignored; the server stamps savedAt


class SaveLayoutResponse(BaseModel):
    canvasId: str
    saved: bool
    savedAt: int
    superseded: bool = False


class CompileRequest(BaseModel):
    """What the client sends to POST /api/compile and POST /api/export."""

    model_config = {"extra": "forbid", "populate_by_name": True}

    instances: list[InstanceModel] = Field(default_factory=list)
    canvas_id: str = Field(default="canvas", alias="canvasId")
    title: str = Field(default="My Website", max_length=200)
    lang: str = Field(default="en", max_length=35)
    year: int | None = None
    preset: str = "light"

    def to_options(self) -> CompileOptions:
        return CompileOptions(
            canvas_id=self.canvas_id,
            title=self.title,
            lang=self.lang,
            year=self.year,
            preset=self.preset,
        )


class CompileWarningModel(BaseModel):
    code: str
    message: str
    instanceId: str | None = None


class CompileResponse(BaseModel):
    markup: str
    stylesheet: str
    script: str
    standalone: str
    warnings: list[CompileWarningModel]


class GenerateRequest(BaseModel):
    """What the client sends to POST /api/generate."""

    model_config = {"extra": "forbid", "populate_by_name": True}

    prompt: str = Field(min_length=1, max_length=10000)
    preset: str = "light"
    canvas_id: str = Field(default="canvas", alias="canvasId")


class GenerateResponse(BaseModel):
    layout: dict[str, Any]
    added: list[str]
    skipped: list[str]
