"""View model exceptions."""

from __future__ import annotations


class ViewModelError(Exception):
    """Base exception for view model errors."""


class DecodeError(ViewModelError):
    """Input data is not valid JSON or does not match the view model shape."""
