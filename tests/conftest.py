from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = REPO_ROOT / "src"
TESTS_PATH = REPO_ROOT / "tests"
for path in (SRC_PATH, TESTS_PATH):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

# Must be set before importing modules that read settings at import time.
os.environ.setdefault("OPENAI_API_KEY", "sk-test")

from fakes import FakeRealtime, FakeTelephony  # noqa: E402


def _clear_cached_settings() -> None:
    from api.dependencies import get_session_config
    from config.settings import get_settings

    get_settings.cache_clear()
    get_session_config.cache_clear()


@pytest.fixture(autouse=True)
def fresh_settings():
    _clear_cached_settings()
    yield
    _clear_cached_settings()


@pytest.fixture
def fake_telephony() -> FakeTelephony:
    return FakeTelephony()


@pytest.fixture
def fake_realtime() -> FakeRealtime:
    return FakeRealtime()


@pytest.fixture(scope="session")
def app():
    import importlib

    main = importlib.import_module("main")
    return main.app
