"""Strict decoding of raw JSON render data into a NotificationViewModel."""

from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError

from src.viewmodel.exceptions import DecodeError
from src.viewmodel.models import NotificationViewModel


def _describe(exc: ValidationError) -> str:
    parts: list[str] = []
    for error in exc.errors(include_url=False):
        location = ".".join(str(part) for part in error["loc"])
        parts.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(parts)


def decode_view_model(data: str | bytes | Any) -> NotificationViewModel:
    """Decode render data, rejecting unknown keys at any nesting level.

    *data* is raw JSON text, or an already-decoded JSON value which is
    re-encoded so both forms go through the same JSON validation path.
    Values are not coerced across JSON types: a string where a number or
    boolean is declared is rejected, as is a number for ``Now``. A missing
    or zero ``Now`` resolves to the current UTC time.

    Raises:
        DecodeError: The data is not JSON or does not fit the view model.
    """
    if not isinstance(data, (str, bytes, bytearray)):
        try:
            data = json.dumps(data)
        except (TypeError, ValueError) as exc:
            raise DecodeError(str(exc)) from exc

    try:
        return NotificationViewModel.model_validate_json(data, strict=True)
    except ValidationError as exc:
        raise DecodeError(_describe(exc)) from exc
