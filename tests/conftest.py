from __future__ import annotations

import logging
from pathlib import Path

import pytest

from tests._fixtures.repo_builder import RepoBuilder


@pytest.fixture
def repo_builder(tmp_path: Path) -> RepoBuilder:
    """Provide a reusable repo builder rooted at the pytest tmp_path."""
    return RepoBuilder(tmp_path)


@pytest.fixture(autouse=True)
def _propagate_reportgen_logs():
    """Keep reportgen records visible to caplog even after configure_logging()."""
    logger = logging.getLogger("reportgen")
    previous = logger.propagate
    logger.propagate = True
    yield
    logger.propagate = previous
