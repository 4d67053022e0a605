"""Exception hierarchy for the template engine.

``str()`` of every error is the engine's positional diagnostic text, which
is what callers see and what the error locator parses:

- ``template: <name>:<line>: <message>`` for parse errors
- ``template: <name>:<line>:<col>: executing "<name>" at <<node>>: <message>``
  for execution errors
"""

from __future__ import annotations


class TemplateError(Exception):
    """Base exception for all template errors."""

    def __init__(
        self,
        message: str,
        name: str = "",
        line: int = 0,
        column: int = 0,
    ) -> None:
        self.message = message
        self.name = name
        self.line = line
        self.column = column
        super().__init__(self._diagnostic())

    def _diagnostic(self) -> str:
        return f"template: {self.name}: {self.message}"


class ParseError(TemplateError):
    """Template source is syntactically invalid."""

    def _diagnostic(self) -> str:
        if self.line:
            return f"template: {self.name}:{self.line}: {self.message}"
        return super()._diagnostic()


class ExecutionError(TemplateError):
    """Template failed while executing against its data."""

    def __init__(
        self,
        message: str,
        name: str = "",
        line: int = 0,
        column: int = 0,
        context: str = "",
    ) -> None:
        self.context = context
        super().__init__(message, name=name, line=line, column=column)

    def _diagnostic(self) -> str:
        location = self.name
        if self.line:
            location = f"{self.name}:{self.line}:{self.column}" if self.column else f"{self.name}:{self.line}"
        if self.context:
            return f'template: {location}: executing "{self.name}" at <{self.context}>: {self.message}'
        return f'template: {location}: executing "{self.name}": {self.message}'
