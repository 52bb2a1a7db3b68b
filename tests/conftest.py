from __future__ import annotations

import pytest

from claude_desktop.core.config import get_settings
from claude_desktop.core.memory_ops import InMemorySystemOps
from claude_desktop.core.state import AppState


@pytest.fixture(autouse=True)
def _settings(monkeypatch):
    for key in ("LOG_DIR", "APP_NAMESPACE", "LOGIN_COMMAND", "SESSION_DIR_NAME"):
        monkeypatch.delenv(f"CLAUDE_DESKTOP_{key}", raising=False)
    monkeypatch.setenv("CLAUDE_DESKTOP_LOG_LEVEL", "WARNING")
    get_settings.cache_clear()  # type: ignore[attr-defined]
    yield
    get_settings.cache_clear()  # type: ignore[attr-defined]


@pytest.fixture
def mock_sys() -> InMemorySystemOps:
    return InMemorySystemOps()


@pytest.fixture
def state(mock_sys: InMemorySystemOps) -> AppState:
    return AppState(mock_sys)
