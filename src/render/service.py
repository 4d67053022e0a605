"""The render operation: decode data, parse, execute, report errors."""

from __future__ import annotations

import structlog

from src.core.config import get_settings
from src.render.types import RenderRequest, RenderResponse
from src.templating import Template, TemplateError, extract_line_column
from src.viewmodel import DecodeError, decode_view_model

DATA_PARSE_ERROR_PREFIX = "Data parse error: "
UNEXPECTED_ERROR_PREFIX = "Unexpected error: "

logger = structlog.get_logger(__name__)


def render(request: RenderRequest) -> RenderResponse:
    """Render *request* and return output or an error response.

    The template is parsed before the data is decoded, so a broken template
    is reported even when the data is also invalid. Every failure, including
    unexpected faults, comes back as a response rather than an exception.
    """
    name = request.name or get_settings().render.default_template_name
    try:
        template = Template(name, request.template)
        try:
            context = decode_view_model(request.data)
        except DecodeError as exc:
            logger.info("data_decode_failed", name=name, error=str(exc))
            return RenderResponse(error=DATA_PARSE_ERROR_PREFIX + str(exc))
        output = template.execute(context)
    except TemplateError as exc:
        return _template_failure(name, exc)
    except Exception as exc:
        logger.exception("render_internal_fault", name=name)
        return RenderResponse(error=f"{UNEXPECTED_ERROR_PREFIX}{exc}")

    logger.debug("template_rendered", name=name, output_len=len(output))
    return RenderResponse(output=output)


def _template_failure(name: str, exc: TemplateError) -> RenderResponse:
    message = str(exc)
    line, column = extract_line_column(message)
    logger.info("template_render_failed", name=name, error=message, line=line, column=column)
    return RenderResponse.failure(message, line=line, column=column)
