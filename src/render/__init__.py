"""Render operation and its host-facing entry points."""

from src.render.host import process_get_schema, process_render, render_bounded
from src.render.service import render
from src.render.types import RenderRequest, RenderResponse

__all__ = [
    "RenderRequest",
    "RenderResponse",
    "process_get_schema",
    "process_render",
    "render",
    "render_bounded",
]
