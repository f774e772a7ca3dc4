"""Small async HTTP transport over urllib, run in worker threads."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from http.client import HTTPException
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen


class TransportError(RuntimeError):
    """Request never produced an HTTP response (DNS, refused, timeout)."""


@dataclass(slots=True)
class HttpResponse:
    status: int
    text: str
    content_type: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def is_json(self) -> bool:
        return "application/json" in self.content_type.lower()

    def json(self) -> Any:
        return json.loads(self.text or "null")


class HttpClient:
    """Blocking urllib calls wrapped for asyncio with a hard timeout."""

    def __init__(self, timeout_sec: float = 10.0) -> None:
        self.timeout_sec = timeout_sec

    async def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        json_body: Any | None = None,
    ) -> HttpResponse:
        return await asyncio.to_thread(self._request_sync, method, url, headers, json_body)

    async def get(self, url: str, headers: dict[str, str] | None = None) -> HttpResponse:
        return await self.request("GET", url, headers=headers)

    async def post_json(self, url: str, payload: Any, headers: dict[str, str] | None = None) -> HttpResponse:
        merged = {"Content-Type": "application/json", **(headers or {})}
        return await self.request("POST", url, headers=merged, json_body=payload)

    def _request_sync(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        json_body: Any | None = None,
    ) -> HttpResponse:
        data = json.dumps(json_body).encode("utf-8") if json_body is not None else None
        req = Request(url=url, data=data, method=method.upper(), headers=headers or {})

        try:
            with urlopen(req, timeout=self.timeout_sec) as resp:
                raw = resp.read().decode("utf-8", errors="replace")
                return HttpResponse(
                    status=resp.status,
                    text=raw,
                    content_type=resp.headers.get("Content-Type", ""),
                )
        except HTTPError as exc:
            raw = exc.read().decode("utf-8", errors="ignore")
            content_type = exc.headers.get("Content-Type", "") if exc.headers else ""
            return HttpResponse(status=exc.code, text=raw, content_type=content_type)
        except URLError as exc:
            raise TransportError(f"URLError: {exc.reason}") from exc
        except TimeoutError as exc:
            raise TransportError(f"timeout after {self.timeout_sec}s") from exc
        except (OSError, HTTPException) as exc:
            raise TransportError(f"{type(exc).__name__}: {exc}") from exc
