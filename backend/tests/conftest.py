from __future__ import annotations

from pathlib import Path
import sys

import pytest
from fastapi.testclient import TestClient


# Ensure `import geotag.*` works when pytest chooses an import mode that
# doesn't automatically add the backend root to sys.path.
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))


@pytest.fixture()
def settings(monkeypatch: pytest.MonkeyPatch):
    # Deterministic provider config; no real network access in tests.
    monkeypatch.setenv("GEOTAG_NOMINATIM_BASE_URL", "https://nominatim.test")
    monkeypatch.setenv("GEOTAG_NOMINATIM_MAX_RETRIES", "3")
    monkeypatch.setenv("GEOTAG_NOMINATIM_BACKOFF_BASE_S", "0.5")
    monkeypatch.setenv("GEOTAG_LOG_LEVEL", "DEBUG")

    from geotag.core.settings import get_settings

    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture()
def client(settings) -> TestClient:  # noqa: ARG001
    from geotag.main import create_app

    return TestClient(create_app())
