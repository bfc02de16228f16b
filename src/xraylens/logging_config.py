"""Logging setup shared by the CLI and the MCP server."""

import logging
import sys
from typing import TextIO


def configure_logging(level: str = "INFO", stream: TextIO | None = None) -> None:
    """Configure root logging with a consistent format.

    Logs go to stdout unless *stream* is given; the MCP stdio server passes
    stderr because stdout carries the protocol.
    """
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=stream or sys.stdout,
    )
