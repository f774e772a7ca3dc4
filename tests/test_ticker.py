"""Unit tests for app.ticker."""

from __future__ import annotations

import asyncio
import random

import pytest
from conftest import json_response, text_response

from app.errors import ServiceUnavailableError
from app.ticker import TickerService

MEXC_TICKER = {"symbol": "ETHUSDT", "lastPrice": "3150.5", "priceChangePercent": "1.25", "volume": "98000.1"}


def _service(fake_http, silent_logger, **kwargs) -> TickerService:
    return TickerService(
        fake_http,
        logger=silent_logger,
        rng=random.Random(7),
        clock_ms=lambda: 1_700_000_000_000,
        **kwargs,
    )


def test_primary_source(fake_http, silent_logger) -> None:
    fake_http.add("mexc.com/api/v3/ticker", json_response(MEXC_TICKER))

    ticker = asyncio.run(_service(fake_http, silent_logger).get_ticker("ethusdt"))

    assert ticker.to_dict() == {
        "symbol": "ETHUSDT",
        "price": 3150.5,
        "change24h": 1.25,
        "volume": 98000.1,
        "timestamp": 1_700_000_000_000,
        "source": "mexc",
    }
    assert fake_http.urls() == ["https://api.mexc.com/api/v3/ticker/24hr?symbol=ETHUSDT"]


def test_falls_back_to_binance(fake_http, silent_logger) -> None:
    fake_http.add("mexc.com", json_response({"code": -1121, "msg": "Invalid symbol."}, status=400))
    fake_http.add("binance.com", json_response({**MEXC_TICKER, "lastPrice": "3151"}))

    ticker = asyncio.run(_service(fake_http, silent_logger).get_ticker("ETHUSDT"))

    assert ticker.source == "binance"
    assert ticker.price == 3151.0
    assert any(level == "warning" and "mexc" in msg for level, msg in silent_logger.records)


def test_malformed_primary_payload_falls_back(fake_http, silent_logger) -> None:
    fake_http.add("mexc.com", text_response("not json"))
    fake_http.add("binance.com", json_response(MEXC_TICKER))
    assert asyncio.run(_service(fake_http, silent_logger).get_ticker("ETHUSDT")).source == "binance"


@pytest.mark.parametrize("field", ["lastPrice", "priceChangePercent", "volume"])
def test_non_finite_primary_field_falls_back(fake_http, silent_logger, field) -> None:
    fake_http.add("mexc.com", json_response({**MEXC_TICKER, field: "NaN"}))
    fake_http.add("binance.com", json_response(MEXC_TICKER))

    ticker = asyncio.run(_service(fake_http, silent_logger).get_ticker("ETHUSDT"))

    assert ticker.source == "binance"
    assert any(level == "warning" and "non-finite" in msg for level, msg in silent_logger.records)


def test_synthetic_when_everything_fails(fake_http, silent_logger) -> None:
    ticker = asyncio.run(_service(fake_http, silent_logger).get_ticker(None))

    assert ticker.symbol == "BTCUSDT"
    assert ticker.source == "synthetic"
    assert 105000 <= ticker.price <= 106000
    assert -0.5 <= ticker.change24h <= 2.5
    assert 50000 <= ticker.volume <= 60000
    assert len(fake_http.calls) == 2


def test_synthetic_can_be_disabled(fake_http, silent_logger) -> None:
    with pytest.raises(ServiceUnavailableError):
        asyncio.run(_service(fake_http, silent_logger, allow_synthetic=False).get_ticker("BTCUSDT"))
