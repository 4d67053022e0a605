#!/usr/bin/env python3
"""Schema CLI — dump the view model schema consumed by template editors.

Usage:
    python -m scripts.dump_schema
    python -m scripts.dump_schema --indent 0
    python -m scripts.dump_schema --output schema.json
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

import structlog

from src.core.config import load_settings
from src.core.logging import setup_logging
from src.schema import get_schema

logger = structlog.get_logger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Dump the view model schema as JSON.",
    )
    parser.add_argument(
        "--indent",
        type=int,
        default=2,
        help="JSON indentation, 0 for compact output (default: 2)",
    )
    parser.add_argument(
        "--output",
        default=None,
        help="Write to this file instead of stdout",
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


def dump(indent: int) -> str:
    document = get_schema().to_dict()
    if indent <= 0:
        return json.dumps(document, ensure_ascii=False, separators=(",", ":"))
    return json.dumps(document, ensure_ascii=False, indent=indent)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    load_settings(args.config)
    setup_logging(level=args.log_level)

    text = dump(args.indent)
    if args.output:
        Path(args.output).write_text(text + "\n", encoding="utf-8")
        logger.info("schema_written", path=args.output, size=len(text))
    else:
        sys.stdout.write(text + "\n")


if __name__ == "__main__":
    main()
