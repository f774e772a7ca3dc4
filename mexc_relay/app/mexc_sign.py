"""Helpers for signing MEXC private REST requests."""

from __future__ import annotations

import hashlib
import hmac
import time
from typing import Mapping
from urllib.parse import urlencode


def now_ms() -> int:
    return int(time.time() * 1000)


def build_query(params: Mapping[str, object]) -> str:
    """Build query string in insertion order without None values."""
    filtered = [(k, v) for k, v in params.items() if v is not None]
    return urlencode(filtered, doseq=True)


def sign_payload(secret: str, payload: str) -> str:
    """Return HMAC SHA256 hex digest for payload."""
    return hmac.new(secret.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256).hexdigest()


def signed_query(
    params: Mapping[str, object] | None,
    api_secret: str,
    timestamp_ms: int | None = None,
) -> tuple[str, str]:
    """Create query string + signature with timestamp appended last."""
    ts = now_ms() if timestamp_ms is None else int(timestamp_ms)
    all_params = {**(params or {}), "timestamp": ts}
    query = build_query(all_params)
    signature = sign_payload(api_secret, query)
    return query, signature


def signed_url(
    base_url: str,
    path: str,
    params: Mapping[str, object] | None,
    api_secret: str,
    timestamp_ms: int | None = None,
) -> str:
    query, signature = signed_query(params, api_secret, timestamp_ms=timestamp_ms)
    return f"{base_url.rstrip('/')}{path}?{query}&signature={signature}"
