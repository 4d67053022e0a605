"""Best-effort source positions from engine diagnostics.

Positions are recovered by matching the diagnostic text, since that is the
only place the engine reports them. Messages that do not match yield
``(0, 0)``.
"""

from __future__ import annotations

import re

# "template: subject:4: ..." or "template: body:7:3: ..."
_LINE_COLUMN_RE = re.compile(r"template:\s*[^:]+:(\d+)(?::(\d+))?")


def extract_line_column(message: str) -> tuple[int, int]:
    """Return ``(line, column)`` from *message*, zero when absent."""
    match = _LINE_COLUMN_RE.search(message)
    if not match:
        return 0, 0
    line = int(match.group(1))
    column = int(match.group(2)) if match.group(2) else 0
    return line, column
