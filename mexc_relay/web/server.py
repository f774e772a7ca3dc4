"""HTTP relay for the trading dashboard: MEXC proxy, ticker and AI analysis.

The app is built on demand by :func:`create_app`; serve it with the
``mexc-relay`` entrypoint or ``uvicorn --factory web.server:create_app``.
"""

from __future__ import annotations

import asyncio
import contextlib
from typing import Any

from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import ValidationError

from app.ai_analyzer import AIAnalyzer
from app.config import AppConfig, load_config
from app.errors import RateLimitExceededError, RelayError
from app.http_client import HttpClient
from app.mexc_client import MexcRelayClient
from app.rate_limiter import FixedWindowRateLimiter, InMemoryRateLimitStore
from app.relay import RelayService
from app.schemas import AccountRequest, AnalyzeRequest, TradeAction, TradeRequest
from app.ticker import TickerService

TOO_MANY_REQUESTS_MESSAGE = "Too many requests, please try again later"


def _client_ip(request: Request) -> str:
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


async def _rate_limit_sweep_loop(limiter: FixedWindowRateLimiter, interval_sec: float) -> None:
    while True:
        await asyncio.sleep(interval_sec)
        try:
            removed = limiter.sweep()
            if removed:
                logger.debug("Rate limiter sweep removed {} expired entries", removed)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Rate limiter sweep error: {}", exc)


def create_app(
    config: AppConfig | None = None,
    http: HttpClient | None = None,
    rate_limiter: FixedWindowRateLimiter | None = None,
    ticker_service: TickerService | None = None,
) -> FastAPI:
    config = config or load_config()
    http = http or HttpClient(timeout_sec=config.http.timeout_sec)
    limiter = rate_limiter or FixedWindowRateLimiter(
        store=InMemoryRateLimitStore(),
        window_sec=config.rate_limit.window_sec,
        max_requests=config.rate_limit.max_requests,
    )
    relay = RelayService(
        MexcRelayClient(
            http,
            spot_base_url=config.mexc.spot_base_url,
            futures_base_url=config.mexc.futures_base_url,
        )
    )
    tickers = ticker_service or TickerService(
        http,
        mexc_url=config.ticker.mexc_url,
        binance_url=config.ticker.binance_url,
        allow_synthetic=config.ticker.allow_synthetic,
    )
    analyzer = AIAnalyzer(http, config=config.ai)

    app = FastAPI(title="mexc_relay")
    app.state.config = config
    app.state.rate_limiter = limiter
    app.state.sweep_task = None

    async def enforce_rate_limit(request: Request) -> None:
        decision = limiter.hit(_client_ip(request))
        if not decision.allowed:
            logger.warning("Rate limit exceeded ip={} count={}", _client_ip(request), decision.count)
            raise RateLimitExceededError(TOO_MANY_REQUESTS_MESSAGE, limiter.retry_after(decision))

    @app.exception_handler(RelayError)
    async def relay_error_handler(_request: Request, exc: RelayError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message}, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        first = exc.errors()[0] if exc.errors() else {}
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "invalid request")
        return JSONResponse(status_code=400, content={"error": f"{field}: {message}" if field else message})

    @app.on_event("startup")
    async def startup_event() -> None:
        app.state.sweep_task = asyncio.create_task(
            _rate_limit_sweep_loop(limiter, config.rate_limit.sweep_interval_sec),
            name="rate-limit-sweep",
        )
        logger.info(
            "Relay started: spot={} futures={} rate_limit={}/{}s",
            config.mexc.spot_base_url,
            config.mexc.futures_base_url,
            config.rate_limit.max_requests,
            config.rate_limit.window_sec,
        )

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        task = app.state.sweep_task
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
            app.state.sweep_task = None

    @app.get("/api/health")
    async def api_health():
        return {"status": "ok", "rateLimitEntries": len(limiter.store)}

    @app.get("/api/market/ticker")
    async def api_ticker(symbol: str = Query(default="BTCUSDT")):
        ticker = await tickers.get_ticker(symbol)
        return ticker.to_dict()

    @app.post("/api/mexc/account", dependencies=[Depends(enforce_rate_limit)])
    async def api_account(body: AccountRequest):
        try:
            snapshot = await relay.account_snapshot(body.apiKey, body.secretKey)
        except RelayError:
            raise
        except Exception as exc:  # noqa: BLE001
            logger.exception("Account snapshot failed: {}", exc)
            return JSONResponse(status_code=500, content={"error": str(exc) or "account_failed"})
        return snapshot.to_dict()

    @app.post("/api/mexc/trade", dependencies=[Depends(enforce_rate_limit)])
    async def api_trade(body: TradeRequest):
        try:
            return await relay.place_trade(
                body.action,
                body.apiKey,
                body.secretKey,
                symbol=body.symbol,
                leverage=body.leverage,
            )
        except RelayError as exc:
            logger.warning("Trade rejected action={} symbol={}: {}", body.action, body.symbol, exc.message)
            raise
        except Exception as exc:  # noqa: BLE001
            logger.exception("Trade placement failed: {}", exc)
            return JSONResponse(status_code=500, content={"error": str(exc) or "trade_failed"})

    @app.post("/api/ai/analyze")
    async def api_analyze(request: Request):
        try:
            raw: Any = await request.json()
            body = AnalyzeRequest.model_validate(raw if isinstance(raw, dict) else {})
        except (ValueError, ValidationError) as exc:
            logger.warning("AI analyze request rejected: {}", exc)
            return TradeAction.failed("invalid request body").model_dump()
        decision = await analyzer.analyze(body.settings, body.marketData, body.currentPositionSide)
        return decision.model_dump()

    return app
