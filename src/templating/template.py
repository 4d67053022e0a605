"""Parsed template ready for execution."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from src.templating.executor import Executor
from src.templating.functions import FUNCTIONS, FunctionSpec
from src.templating.nodes import ListNode
from src.templating.parser import parse


class Template:
    """A named template parsed once and executable against any data.

    Raises :class:`~src.templating.exceptions.ParseError` on construction
    when *source* is invalid.
    """

    def __init__(
        self,
        name: str,
        source: str,
        functions: Mapping[str, FunctionSpec] = FUNCTIONS,
    ) -> None:
        self.name = name
        self.source = source
        self._functions = functions
        self.tree: ListNode = parse(source, name)

    def execute(self, data: Any) -> str:
        """Render against *data*; raises ``ExecutionError`` on failure."""
        executor = Executor(self.tree, self.source, self.name, self._functions)
        return executor.execute(data)
