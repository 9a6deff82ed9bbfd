from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from error_backend.config import Settings
from error_backend.main import create_app
from error_backend.metrics import RequestMetrics

PAGES = {
    "404.html": b"<h1>404 custom</h1>",
    "4xx.html": b"<h1>4xx class</h1>",
    "5xx.html": b"<h1>5xx class</h1>",
    "404.json": b'{"code": 404}',
    "5xx.json": b'{"class": "5xx"}',
}


@pytest.fixture
def pages_dir(tmp_path: Path) -> Path:
    root = tmp_path / "www"
    root.mkdir()
    for name, body in PAGES.items():
        (root / name).write_bytes(body)
    return root


@pytest.fixture
def metrics() -> RequestMetrics:
    return RequestMetrics()


@pytest.fixture
def make_client(metrics: RequestMetrics) -> Callable[..., TestClient]:
    """Build a TestClient over a fresh app; keyword arguments go to `Settings`."""

    def _make(**overrides) -> TestClient:
        settings = Settings(**overrides)
        return TestClient(create_app(settings, metrics))

    return _make


@pytest.fixture
def client(make_client: Callable[..., TestClient], pages_dir: Path) -> TestClient:
    return make_client(error_files_path=pages_dir)
