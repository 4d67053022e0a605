#!/usr/bin/env python3
"""Render CLI — render a notification template against view model data.

Usage:
    python -m scripts.render_template template.tmpl tests/fixtures/alarm.json
    python -m scripts.render_template template.tmpl data.json --name subject
    python -m scripts.render_template template.tmpl data.json --json

The data file holds the notification JSON (``CompanyID``, ``Events``,
``Config``, ...). Rendered output goes to stdout; on failure the error is
written to stderr and the exit status is 1.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

import structlog

from src.core.config import load_settings
from src.core.logging import setup_logging
from src.render import RenderRequest, render_bounded

logger = structlog.get_logger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Render a notification template against view model data.",
    )
    parser.add_argument(
        "template",
        help="Path to the template file",
    )
    parser.add_argument(
        "data",
        help="Path to the data JSON file",
    )
    parser.add_argument(
        "--name",
        default="",
        help="Template name used in diagnostics (default: from settings)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Render time limit in seconds (default: from settings)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full render response as JSON",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level override: DEBUG, INFO, WARNING, ERROR",
    )
    return parser.parse_args(argv)


def format_error(response: dict[str, Any]) -> str:
    """One-line error report with the position when one is known."""
    error = response.get("error", "")
    line = response.get("line")
    if not line:
        return f"error: {error}"
    column = response.get("column")
    where = f"{line}:{column}" if column else f"{line}"
    return f"error at {where}: {error}"


async def run(args: argparse.Namespace) -> int:
    load_settings(args.config)
    setup_logging(level=args.log_level)

    template = Path(args.template).read_text(encoding="utf-8")
    data = Path(args.data).read_text(encoding="utf-8")
    logger.debug("render_requested", template=args.template, data=args.data)

    request = RenderRequest(name=args.name, template=template, data=data)
    response = await render_bounded(request, timeout_secs=args.timeout)

    if args.json:
        print(json.dumps(response, indent=2))
        return 1 if "error" in response else 0

    if "error" in response:
        print(format_error(response), file=sys.stderr)
        return 1

    sys.stdout.write(response.get("output", ""))
    return 0


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    code = asyncio.run(run(args))
    sys.exit(code)


if __name__ == "__main__":
    main()
