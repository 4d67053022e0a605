"""Request and response shapes of the render operation."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RenderRequest(BaseModel):
    """Template text plus the data it renders against.

    ``data`` is raw JSON text or an already-decoded JSON value.
    """

    name: str = ""
    template: str
    data: Any = None


class RenderResponse(BaseModel):
    """Rendered output, or an error with a best-effort position.

    ``startX``/``endX`` describe a range collapsed to the error position;
    diagnostics carry a single point only.
    """

    model_config = ConfigDict(populate_by_name=True)

    output: str = ""
    error: str | None = None

    line: int | None = None
    column: int | None = None

    start_line: int | None = Field(None, alias="startLine")
    start_column: int | None = Field(None, alias="startColumn")
    end_line: int | None = Field(None, alias="endLine")
    end_column: int | None = Field(None, alias="endColumn")

    @classmethod
    def failure(cls, error: str, line: int = 0, column: int = 0) -> RenderResponse:
        """Error response; zero positions are left out."""
        line_or_none = line or None
        column_or_none = column or None
        return cls(
            error=error,
            line=line_or_none,
            column=column_or_none,
            start_line=line_or_none,
            start_column=column_or_none,
            end_line=line_or_none,
            end_column=column_or_none,
        )

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
