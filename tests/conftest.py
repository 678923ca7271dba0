"""Shared pytest fixtures for the rtlift test suite."""

from __future__ import annotations

import pytest

from rtlift.services import LoggingHost, RecordingDiagnostics


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch: pytest.MonkeyPatch):
    for name in ("RTLIFT_DIAGNOSTICS", "RTLIFT_TRACE"):
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def host() -> LoggingHost:
    return LoggingHost()


@pytest.fixture
def recording() -> RecordingDiagnostics:
    return RecordingDiagnostics()
