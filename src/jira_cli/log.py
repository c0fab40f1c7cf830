"""Logging configuration.

Logs go to stderr through rich; stdout carries command output and, for the
MCP server, the protocol stream.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(message)s"


def configure_logging(verbose: bool = False) -> None:
    """Install a stderr RichHandler on the ``jira_cli`` logger."""
    level = logging.DEBUG if verbose else logging.WARNING
    logger = logging.getLogger("jira_cli")
    logger.setLevel(level)

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(
            console=Console(stderr=True),
            show_path=verbose,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    for handler in logger.handlers:
        handler.setLevel(level)
