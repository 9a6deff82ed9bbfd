"""
Tests for the HTTP surface.

Drives the app through TestClient with page fixtures in a temp directory.
"""

from collections.abc import Callable
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from error_backend.api.headers import DEBUG_ECHO_HEADERS
from error_backend.config import ConfigurationError, Settings
from error_backend.main import create_app
from error_backend.service import error_pages


class TestErrorPage:
    def test_exact_page(self, client: TestClient, pages_dir: Path) -> None:
        response = client.get("/", headers={"X-Code": "404", "X-Format": "text/html"})
        assert response.status_code == 404
        assert response.headers["content-type"] == "text/html"
        assert response.content == (pages_dir / "404.html").read_bytes()

    def test_class_fallback_keeps_status(self, client: TestClient) -> None:
        response = client.get("/", headers={"X-Code": "503", "X-Format": "text/html"})
        assert response.status_code == 503
        assert response.content == b"<h1>5xx class</h1>"

    def test_json_via_explicit_header(self, client: TestClient) -> None:
        response = client.get("/", headers={"X-Code": "500", "X-Format": "application/json"})
        assert response.status_code == 500
        assert response.headers["content-type"] == "application/json"
        assert response.json() == {"class": "5xx"}

    def test_json_via_accept_quality(self, client: TestClient) -> None:
        response = client.get(
            "/",
            headers={"X-Code": "404", "Accept": "text/html;q=0.8, application/json;q=0.9"},
        )
        assert response.status_code == 404
        assert response.headers["content-type"] == "application/json"
        assert response.json() == {"code": 404}

    def test_invalid_code_uses_404(self, client: TestClient) -> None:
        response = client.get("/", headers={"X-Code": "abc", "X-Format": "text/html"})
        assert response.status_code == 404
        assert response.content == b"<h1>404 custom</h1>"

    def test_missing_code_uses_404(self, client: TestClient) -> None:
        response = client.get("/")
        assert response.status_code == 404
        assert response.content == b"<h1>404 custom</h1>"

    def test_unknown_format_uses_default(self, client: TestClient) -> None:
        response = client.get("/", headers={"X-Code": "404", "X-Format": "application/x-unknown-thing"})
        assert response.headers["content-type"] == "text/html"
        assert response.content == b"<h1>404 custom</h1>"

    def test_unsupported_accept_uses_configured_default(
        self, make_client: Callable[..., TestClient], pages_dir: Path
    ) -> None:
        client = make_client(error_files_path=pages_dir, default_response_format="application/json")
        response = client.get("/", headers={"X-Code": "404", "Accept": "image/png"})
        assert response.headers["content-type"] == "application/json"
        assert response.json() == {"code": 404}

    def test_any_path_and_method(self, client: TestClient) -> None:
        response = client.post("/some/original/path", headers={"X-Code": "502"})
        assert response.status_code == 502
        assert response.content == b"<h1>5xx class</h1>"

    def test_not_found_when_no_page(self, client: TestClient) -> None:
        response = client.get("/", headers={"X-Code": "503", "X-Format": "text/plain"})
        assert response.status_code == 404
        assert response.text == "Not Found"
        assert response.headers["content-type"].startswith("text/plain")

    @pytest.mark.parametrize("code", [100, 200, 301, 404, 418, 500, 599])
    def test_empty_dir_always_plain_not_found(
        self, make_client: Callable[..., TestClient], tmp_path: Path, code: int
    ) -> None:
        client = make_client(error_files_path=tmp_path)
        response = client.get("/", headers={"X-Code": str(code)})
        assert response.status_code == 404
        assert response.text == "Not Found"

    def test_bodiless_status(self, make_client: Callable[..., TestClient], tmp_path: Path) -> None:
        (tmp_path / "204.html").write_text("ignored")
        client = make_client(error_files_path=tmp_path)
        response = client.get("/", headers={"X-Code": "204"})
        assert response.status_code == 204
        assert response.content == b""

    @pytest.mark.parametrize("code", ["100", "101"])
    def test_informational_code_gets_plain_not_found(
        self, make_client: Callable[..., TestClient], tmp_path: Path, code: str
    ) -> None:
        (tmp_path / "1xx.html").write_text("interim")
        (tmp_path / f"{code}.html").write_text("interim")
        client = make_client(error_files_path=tmp_path)
        response = client.get("/", headers={"X-Code": code})
        assert response.status_code == 404
        assert response.text == "Not Found"

    def test_page_removed_after_lookup_still_served(
        self, client: TestClient, pages_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (pages_dir / "503.html").write_bytes(b"<h1>503 exact</h1>")
        lookup = error_pages.find_page

        def find_then_remove(**kwargs):
            page = lookup(**kwargs)
            page.path.unlink()
            return page

        monkeypatch.setattr(error_pages, "find_page", find_then_remove)
        response = client.get("/", headers={"X-Code": "503", "X-Format": "text/html"})
        assert response.status_code == 503
        assert response.content == b"<h1>503 exact</h1>"
        assert not (pages_dir / "503.html").exists()


class TestDebugEcho:
    HEADERS = {
        "X-Code": "503",
        "X-Format": "text/html",
        "X-Original-URI": "/api/orders",
        "X-Namespace": "shop",
        "X-Ingress-Name": "shop-ingress",
        "X-Service-Name": "orders",
        "X-Service-Port": "8080",
        "X-Request-ID": "abc123",
    }

    def test_headers_echoed_when_debug(self, make_client: Callable[..., TestClient], pages_dir: Path) -> None:
        client = make_client(error_files_path=pages_dir, debug=True)
        response = client.get("/", headers=self.HEADERS)
        for name, value in self.HEADERS.items():
            assert response.headers[name] == value
        assert response.headers["content-type"] == "text/html"
        assert response.content == b"<h1>5xx class</h1>"

    def test_missing_headers_echoed_empty(
        self, make_client: Callable[..., TestClient], pages_dir: Path
    ) -> None:
        client = make_client(error_files_path=pages_dir, debug=True)
        response = client.get("/", headers={"X-Code": "404"})
        for name in DEBUG_ECHO_HEADERS:
            assert name in response.headers
        assert response.headers["X-Namespace"] == ""

    def test_echo_on_not_found(self, make_client: Callable[..., TestClient], tmp_path: Path) -> None:
        client = make_client(error_files_path=tmp_path, debug=True)
        response = client.get("/", headers=self.HEADERS)
        assert response.status_code == 404
        assert response.headers["X-Ingress-Name"] == "shop-ingress"
        assert response.headers["content-type"].startswith("text/plain")

    def test_no_echo_by_default(self, client: TestClient) -> None:
        response = client.get("/", headers=self.HEADERS)
        assert "X-Namespace" not in response.headers


class TestHealthAndMetrics:
    def test_healthz(self, client: TestClient) -> None:
        response = client.get("/healthz")
        assert response.status_code == 200
        assert response.json() == {"ok": True}

    def test_metrics_exposition(self, client: TestClient) -> None:
        client.get("/", headers={"X-Code": "404"})
        response = client.get("/metrics")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert 'default_http_backend_http_request_count_total{proto="1.1"} 1.0' in response.text
        assert "default_http_backend_http_request_duration_seconds_bucket" in response.text


class TestStartup:
    def test_unknown_default_format_refuses_to_start(self, pages_dir: Path) -> None:
        settings = Settings(error_files_path=pages_dir, default_response_format="application/x-unknown-thing")
        with pytest.raises(ConfigurationError):
            create_app(settings)

    def test_missing_pages_dir_still_starts(self, tmp_path: Path) -> None:
        app = create_app(Settings(error_files_path=tmp_path / "absent"))
        with TestClient(app) as client:
            assert client.get("/healthz").status_code == 200
