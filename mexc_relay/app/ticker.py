"""Public 24h ticker with exchange fallbacks."""

from __future__ import annotations

import math
import random
import time
from typing import Any, Callable
from urllib.parse import quote

from loguru import logger as default_logger

from app.errors import ServiceUnavailableError
from app.http_client import HttpClient, TransportError
from app.models import Ticker

DEFAULT_SYMBOL = "BTCUSDT"


class TickerService:
    """MEXC first, Binance second, synthetic placeholder last.

    Synthetic tickers are tagged ``source="synthetic"`` so callers can tell
    them apart from live data.
    """

    def __init__(
        self,
        http: HttpClient,
        mexc_url: str = "https://api.mexc.com/api/v3/ticker/24hr",
        binance_url: str = "https://api.binance.com/api/v3/ticker/24hr",
        allow_synthetic: bool = True,
        logger: Any | None = None,
        rng: random.Random | None = None,
        clock_ms: Callable[[], int] | None = None,
    ) -> None:
        self.http = http
        self.sources = [("mexc", mexc_url), ("binance", binance_url)]
        self.allow_synthetic = allow_synthetic
        self.logger = logger or default_logger
        self.rng = rng or random.Random()
        self.clock_ms = clock_ms or (lambda: int(time.time() * 1000))

    async def get_ticker(self, symbol: str | None = None) -> Ticker:
        symbol = (symbol or DEFAULT_SYMBOL).strip().upper() or DEFAULT_SYMBOL
        for source, url in self.sources:
            try:
                return await self._fetch(source, url, symbol)
            except (TransportError, ValueError, TypeError, KeyError) as exc:
                self.logger.warning("Ticker source {} failed for {}: {}", source, symbol, exc)

        if not self.allow_synthetic:
            raise ServiceUnavailableError("Market API unreachable")
        self.logger.warning("Ticker for {}: all sources failed, serving synthetic data", symbol)
        return self._synthetic(symbol)

    async def _fetch(self, source: str, url: str, symbol: str) -> Ticker:
        response = await self.http.get(f"{url}?symbol={quote(symbol)}")
        if not response.ok:
            raise ValueError(f"HTTP {response.status}")
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError("unexpected ticker payload")
        price = float(data["lastPrice"])
        change = float(data["priceChangePercent"])
        volume = float(data["volume"])
        if not all(math.isfinite(value) for value in (price, change, volume)):
            raise ValueError("non-finite ticker field")
        return Ticker(
            symbol=symbol,
            price=price,
            change24h=change,
            volume=volume,
            timestamp=self.clock_ms(),
            source=source,
        )

    def _synthetic(self, symbol: str) -> Ticker:
        return Ticker(
            symbol=symbol,
            price=105000 + self.rng.random() * 1000,
            change24h=-0.5 + self.rng.random() * 3,
            volume=50000 + self.rng.random() * 10000,
            timestamp=self.clock_ms(),
            source="synthetic",
        )
