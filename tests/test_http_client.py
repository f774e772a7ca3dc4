"""Unit tests for app.http_client against a local HTTP server."""

from __future__ import annotations

import asyncio
import contextlib
import json
import random
import socket
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from app.http_client import HttpClient, TransportError
from app.ticker import TickerService

SLOW_REPLY_SEC = 1.0


class _Handler(BaseHTTPRequestHandler):
    def do_GET(self) -> None:
        if self.path == "/ok":
            self._send(200, {"lastPrice": "1.5"})
        elif self.path == "/denied":
            self._send(401, {"code": 401, "msg": "Api key info invalid"})
        elif self.path == "/html":
            self._send_raw(502, b"<html>bad gateway</html>", "text/html")
        elif self.path == "/slow":
            time.sleep(SLOW_REPLY_SEC)
            with contextlib.suppress(OSError):
                self._send(200, {})
        elif self.path.startswith("/drop"):
            self.close_connection = True

    def do_POST(self) -> None:
        length = int(self.headers.get("Content-Length") or 0)
        body = json.loads(self.rfile.read(length) or b"null")
        self._send(200, {"received": body, "contentType": self.headers.get("Content-Type")})

    def _send(self, status: int, payload: object) -> None:
        self._send_raw(status, json.dumps(payload).encode("utf-8"), "application/json")

    def _send_raw(self, status: int, body: bytes, content_type: str) -> None:
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format: str, *args: object) -> None:
        pass


@pytest.fixture(scope="module")
def base_url():
    server = ThreadingHTTPServer(("127.0.0.1", 0), _Handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_address[1]}"
    server.shutdown()
    server.server_close()


@pytest.fixture(autouse=True)
def _no_proxy(monkeypatch):
    for name in ("http_proxy", "HTTP_PROXY", "https_proxy", "HTTPS_PROXY", "all_proxy", "ALL_PROXY"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def refused_url() -> str:
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    return f"http://127.0.0.1:{port}/"


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class TestResponses:
    def test_success_json(self, base_url) -> None:
        resp = asyncio.run(HttpClient(timeout_sec=5).get(f"{base_url}/ok"))
        assert resp.ok
        assert resp.is_json
        assert resp.json() == {"lastPrice": "1.5"}

    def test_error_status_keeps_json_body(self, base_url) -> None:
        resp = asyncio.run(HttpClient(timeout_sec=5).get(f"{base_url}/denied"))
        assert resp.status == 401
        assert not resp.ok
        assert resp.is_json
        assert resp.json()["msg"] == "Api key info invalid"

    def test_error_status_keeps_text_body(self, base_url) -> None:
        resp = asyncio.run(HttpClient(timeout_sec=5).get(f"{base_url}/html"))
        assert resp.status == 502
        assert not resp.is_json
        assert "bad gateway" in resp.text

    def test_post_json_sends_body_and_header(self, base_url) -> None:
        resp = asyncio.run(HttpClient(timeout_sec=5).post_json(f"{base_url}/echo", {"symbol": "BTC_USDT"}))
        assert resp.json() == {"received": {"symbol": "BTC_USDT"}, "contentType": "application/json"}


# ---------------------------------------------------------------------------
# Transport failures
# ---------------------------------------------------------------------------


class TestTransportFailures:
    def test_connection_closed_without_response(self, base_url) -> None:
        with pytest.raises(TransportError):
            asyncio.run(HttpClient(timeout_sec=5).get(f"{base_url}/drop"))

    def test_read_timeout(self, base_url) -> None:
        with pytest.raises(TransportError):
            asyncio.run(HttpClient(timeout_sec=0.2).get(f"{base_url}/slow"))

    def test_connection_refused(self, refused_url) -> None:
        with pytest.raises(TransportError):
            asyncio.run(HttpClient(timeout_sec=2).get(refused_url))

    def test_ticker_falls_back_when_sources_hang_up(self, base_url, silent_logger) -> None:
        service = TickerService(
            HttpClient(timeout_sec=5),
            mexc_url=f"{base_url}/drop/mexc",
            binance_url=f"{base_url}/drop/binance",
            logger=silent_logger,
            rng=random.Random(3),
        )

        ticker = asyncio.run(service.get_ticker("BTCUSDT"))

        assert ticker.source == "synthetic"
        assert len([level for level, _ in silent_logger.records if level == "warning"]) == 3
