"""Pytest configuration - shared fixtures for engine tests.

Engines take an injectable timer backend; tests use ManualTimers so time
only moves when a test calls advance().
"""
from __future__ import annotations

import os
from pathlib import Path
import pytest

from tests.helpers.fake_timers import ManualTimers

ROOT = Path(__file__).resolve().parents[1]


class RecordingExecutor:
    """Executor that records every step and fails on request."""

    def __init__(self, fail_when=None):
        self.calls = []
        self._fail_when = fail_when

    def __call__(self, step):
        self.calls.append(step)
        if self._fail_when is not None and self._fail_when(step):
            raise RuntimeError(f"failed: {step!r}")


@pytest.fixture
def project_root():
    """Return path to project root."""
    return ROOT


@pytest.fixture
def timers():
    return ManualTimers()


@pytest.fixture
def executor():
    return RecordingExecutor()


@pytest.fixture
def failing_executor():
    return RecordingExecutor(fail_when=lambda step: True)


@pytest.fixture
def routines_dir(tmp_path, monkeypatch):
    """Isolated app data dir so nothing touches the real user profile."""
    monkeypatch.setenv("SAINTGRID_DATA_DIR", str(tmp_path / "data"))
    return tmp_path / "data" / "routines"


@pytest.fixture(scope="session")
def qt_app():
    """QCoreApplication for tests that need a real Qt event loop."""
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    from PyQt5.QtCore import QCoreApplication
    app = QCoreApplication.instance() or QCoreApplication([])
    return app


@pytest.fixture
def file_handler_cleanup():
    """Detach any file handler a test attached to the global logger."""
    from saintgrid.utils.logger import logger

    yield
    handler = logger._file_handler
    if handler is not None:
        logger._logger.removeHandler(handler)
        handler.close()
        logger._file_handler = None
