"""Tests for docgraph.logging."""

from __future__ import annotations

import logging
from pathlib import Path

from docgraph.logging import configure_logging, get_logger


def test_get_logger_nests_under_docgraph() -> None:
    assert get_logger().name == "docgraph"
    assert get_logger("graph.builder").name == "docgraph.graph.builder"


def test_configure_logging_levels_and_handler_reset(tmp_path: Path) -> None:
    assert configure_logging().level == logging.INFO
    assert configure_logging(quiet=True).level == logging.WARNING

    logger = configure_logging(verbose=True, quiet=True, log_file=tmp_path / "run.log")

    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 2
    get_logger("scanner").debug("walked %d directories", 3)
    for handler in logger.handlers:
        handler.flush()
    assert "docgraph.scanner: walked 3 directories" in (tmp_path / "run.log").read_text(encoding="utf-8")

    assert len(configure_logging().handlers) == 1
