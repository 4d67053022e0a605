"""Template language: parsing, execution, functions and error positions."""

from src.templating.exceptions import ExecutionError, ParseError, TemplateError
from src.templating.functions import (
    FUNCTIONS,
    REGISTRY,
    FunctionCategory,
    FunctionSpec,
)
from src.templating.locator import extract_line_column
from src.templating.parser import parse
from src.templating.template import Template

__all__ = [
    "FUNCTIONS",
    "REGISTRY",
    "ExecutionError",
    "FunctionCategory",
    "FunctionSpec",
    "ParseError",
    "Template",
    "TemplateError",
    "extract_line_column",
    "parse",
]
