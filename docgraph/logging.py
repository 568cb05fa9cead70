"""Console and file log sinks shared by the docgraph commands."""

from __future__ import annotations

import logging
from pathlib import Path

ROOT_LOGGER = "docgraph"
CONSOLE_FORMAT = "[docgraph] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """``get_logger("graph.builder")`` -> ``docgraph.graph.builder``."""
    if not name:
        return logging.getLogger(ROOT_LOGGER)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def _level(verbose: bool, quiet: bool) -> int:
    # --verbose beats --quiet when both are given.
    if verbose:
        return logging.DEBUG
    return logging.WARNING if quiet else logging.INFO


def configure_logging(
    *, verbose: bool = False, quiet: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Point docgraph logging at stderr, and at ``log_file`` when given.

    Diagnostics go to stdout through the reporters; log records never do, so
    ``--format json`` output stays parseable. Calling this again replaces the
    previously installed handlers.
    """
    level = _level(verbose, quiet)
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    sinks: list[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        sinks.append(logging.FileHandler(log_file, encoding="utf-8"))
    for sink in sinks:
        sink.setLevel(level)
        pattern = FILE_FORMAT if isinstance(sink, logging.FileHandler) else CONSOLE_FORMAT
        sink.setFormatter(logging.Formatter(pattern))
        logger.addHandler(sink)
    return logger


__all__ = ["configure_logging", "get_logger"]
