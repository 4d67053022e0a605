"""JSON-in/JSON-out entry points for embedding hosts.

Each call is self-contained and never raises: faults come back as
``{"error": "Unexpected error: ..."}``. :func:`render_bounded` adds the
wall-clock limit hosts apply to a render; a render that overruns is
reported as failed while its worker thread runs to completion.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

import structlog

from src.core.config import get_settings
from src.render.service import UNEXPECTED_ERROR_PREFIX, render
from src.render.types import RenderRequest, RenderResponse
from src.schema import get_schema

logger = structlog.get_logger(__name__)


def _error_json(message: str) -> str:
    return json.dumps({"error": message})


def process_render(template: str, data_json: str, name: str | None = None) -> str:
    """Render *template* against raw JSON *data_json*; returns response JSON."""
    try:
        response = render(RenderRequest(name=name or "", template=template, data=data_json))
        return json.dumps(response.to_dict())
    except Exception as exc:
        logger.exception("render_internal_fault", name=name)
        return _error_json(f"{UNEXPECTED_ERROR_PREFIX}{exc}")


def process_get_schema() -> str:
    """Return the view model schema document as JSON."""
    try:
        return json.dumps(get_schema().to_dict())
    except Exception as exc:
        logger.exception("schema_internal_fault")
        return _error_json(f"{UNEXPECTED_ERROR_PREFIX}{exc}")


async def render_bounded(
    request: RenderRequest,
    timeout_secs: float | None = None,
) -> dict[str, Any]:
    """Render in a worker thread, giving up after *timeout_secs*.

    Defaults to ``render.timeout_secs`` from settings.
    """
    if timeout_secs is None:
        timeout_secs = get_settings().render.timeout_secs

    try:
        response: RenderResponse = await asyncio.wait_for(
            asyncio.to_thread(render, request),
            timeout=timeout_secs,
        )
    except TimeoutError:
        logger.warning("render_timed_out", name=request.name, timeout_secs=timeout_secs)
        return {"error": f"render timed out after {timeout_secs:g}s"}
    return response.to_dict()
