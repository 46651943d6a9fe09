from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from tests._fixtures.query_tree import QueryTreeBuilder


@pytest.fixture
def tree(tmp_path: Path) -> Iterator[QueryTreeBuilder]:
    """Provide a query tree rooted under the pytest tmp_path."""
    builder = QueryTreeBuilder(tmp_path)
    yield builder
    builder.close()


@pytest.fixture(autouse=True)
def _restore_nxquery_logger() -> Iterator[None]:
    """CLI runs install their own handlers; put propagation back for caplog."""
    yield
    logger = logging.getLogger("nxquery")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
