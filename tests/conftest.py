"""Shared pytest fixtures for relay tests."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

import pytest

from app.http_client import HttpClient, HttpResponse, TransportError

VALID_KEY = "mx0vglAPIKEY123456"
VALID_SECRET = "secretSECRET987654321"


def json_response(body: Any, status: int = 200) -> HttpResponse:
    return HttpResponse(status=status, text=json.dumps(body), content_type="application/json")


def text_response(text: str, status: int = 200) -> HttpResponse:
    return HttpResponse(status=status, text=text, content_type="text/html")


@dataclass
class RecordedCall:
    method: str
    url: str
    headers: dict[str, str]
    json_body: Any


class FakeHttpClient(HttpClient):
    """Routes requests by URL substring; unmatched URLs fail like a dead host."""

    def __init__(self) -> None:
        super().__init__(timeout_sec=1.0)
        self.routes: list[tuple[str, HttpResponse | Exception]] = []
        self.calls: list[RecordedCall] = []

    def add(self, fragment: str, outcome: HttpResponse | Exception) -> FakeHttpClient:
        self.routes.append((fragment, outcome))
        return self

    async def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        json_body: Any | None = None,
    ) -> HttpResponse:
        self.calls.append(RecordedCall(method.upper(), url, dict(headers or {}), json_body))
        for fragment, outcome in self.routes:
            if fragment in url:
                if isinstance(outcome, Exception):
                    raise outcome
                return outcome
        raise TransportError(f"URLError: no route for {url}")

    def urls(self) -> list[str]:
        return [call.url for call in self.calls]


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_http() -> FakeHttpClient:
    return FakeHttpClient()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def silent_logger():
    class _Logger:
        def __init__(self) -> None:
            self.records: list[tuple[str, str]] = []

        def _record(self, level: str, message: str, *args: object) -> None:
            self.records.append((level, message.format(*args)))

        def debug(self, message: str, *args: object) -> None:
            self._record("debug", message, *args)

        def info(self, message: str, *args: object) -> None:
            self._record("info", message, *args)

        def warning(self, message: str, *args: object) -> None:
            self._record("warning", message, *args)

        def error(self, message: str, *args: object) -> None:
            self._record("error", message, *args)

        def exception(self, message: str, *args: object) -> None:
            self._record("exception", message, *args)

    return _Logger()
