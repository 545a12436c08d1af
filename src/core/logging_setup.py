"""Logging configuration for the cache server.

Handlers write to stderr: stdout carries the MCP stdio transport.
"""

from __future__ import annotations

import logging
import sys

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO", log_format: str = DEFAULT_LOG_FORMAT) -> None:
    """Replace root handlers with a single stderr handler at `level`.

    Unknown level names fall back to INFO.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, (level or "INFO").upper(), logging.INFO))

    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(log_format))
    root.addHandler(handler)
