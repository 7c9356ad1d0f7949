"""Shared fixtures for mimiq tests."""

from __future__ import annotations

import io
import logging
from pathlib import Path

import pytest
from mimiq.logs import LOGGER_NAME, configure_logging
from mimiq.models import WorkingPaths

from .fakes import FakeProvider, FakeRunner


@pytest.fixture(autouse=True)
def _reset_mimiq_logger():
    """Detach handlers so no test writes to another test's streams."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def provider() -> FakeProvider:
    """Provider with two simulators and every dependency installed."""
    return FakeProvider()


@pytest.fixture
def runner() -> FakeRunner:
    """Runner answering every command with status 0."""
    return FakeRunner()


@pytest.fixture
def working_paths(tmp_path: Path) -> WorkingPaths:
    """Working directories under a temporary root (not created yet)."""
    return WorkingPaths.for_root(tmp_path / ".mimiq")


@pytest.fixture
def destination(tmp_path: Path) -> Path:
    """Existing output directory."""
    out = tmp_path / "out"
    out.mkdir()
    return out


@pytest.fixture
def console() -> io.StringIO:
    """Quiet console sink for the application logger."""
    stream = io.StringIO()
    configure_logging(verbose=False, stream=stream)
    return stream
