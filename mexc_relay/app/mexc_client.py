"""Signed MEXC REST client used by the relay routes."""

from __future__ import annotations

from typing import Any

from loguru import logger as default_logger

from app.errors import UpstreamError
from app.http_client import HttpClient, HttpResponse, TransportError
from app.mexc_sign import signed_url

SPOT_ACCOUNT_PATH = "/api/v3/account"
FUTURES_ASSETS_PATH = "/futures/api/v1/private/account/assets"
FUTURES_POSITIONS_PATH = "/futures/api/v1/private/position/open_details"
FUTURES_OPEN_ORDERS_PATH = "/futures/api/v1/private/order/list/open_orders"
FUTURES_HISTORY_ORDERS_PATH = "/futures/api/v1/private/order/list/history_orders"
FUTURES_ORDER_CREATE_PATH = "/futures/api/v1/private/order/create"

ORDER_TYPE_MARKET = 5
OPEN_TYPE_ISOLATED = 1


class MexcRelayClient:
    """Stateless client: credentials arrive with every call."""

    def __init__(
        self,
        http: HttpClient,
        spot_base_url: str = "https://api.mexc.com",
        futures_base_url: str = "https://fapi.mexc.com",
        logger: Any | None = None,
    ) -> None:
        self.http = http
        self.spot_base_url = spot_base_url.rstrip("/")
        self.futures_base_url = futures_base_url.rstrip("/")
        self.logger = logger or default_logger

    async def get_spot_account(self, api_key: str, secret_key: str) -> dict[str, Any]:
        return await self.private_request(self.spot_base_url, SPOT_ACCOUNT_PATH, "GET", api_key, secret_key)

    async def get_futures_assets(self, api_key: str, secret_key: str) -> dict[str, Any]:
        return await self.private_request(self.futures_base_url, FUTURES_ASSETS_PATH, "GET", api_key, secret_key)

    async def get_open_positions(self, api_key: str, secret_key: str) -> dict[str, Any]:
        return await self.private_request(self.futures_base_url, FUTURES_POSITIONS_PATH, "GET", api_key, secret_key)

    async def get_open_orders(self, api_key: str, secret_key: str) -> dict[str, Any]:
        return await self.private_request(self.futures_base_url, FUTURES_OPEN_ORDERS_PATH, "GET", api_key, secret_key)

    async def get_history_orders(self, api_key: str, secret_key: str, states: str = "3,4") -> dict[str, Any]:
        return await self.private_request(
            self.futures_base_url,
            FUTURES_HISTORY_ORDERS_PATH,
            "GET",
            api_key,
            secret_key,
            {"states": states},
        )

    async def create_order(
        self,
        api_key: str,
        secret_key: str,
        symbol: str,
        side: int,
        leverage: int,
        vol: float = 1,
    ) -> dict[str, Any]:
        params: dict[str, object] = {
            "symbol": symbol,
            "vol": vol,
            "side": side,
            "type": ORDER_TYPE_MARKET,
            "openType": OPEN_TYPE_ISOLATED,
            "leverage": leverage,
        }
        return await self.private_request(
            self.futures_base_url,
            FUTURES_ORDER_CREATE_PATH,
            "POST",
            api_key,
            secret_key,
            params,
        )

    async def private_request(
        self,
        base_url: str,
        path: str,
        method: str,
        api_key: str,
        secret_key: str,
        params: dict[str, object] | None = None,
    ) -> dict[str, Any]:
        url = signed_url(base_url, path, params, secret_key)
        headers = {"X-MEXC-APIKEY": api_key, "Content-Type": "application/json"}
        try:
            response = await self.http.request(method, url, headers=headers)
        except TransportError as exc:
            self._log_error(path, exc)
            raise UpstreamError(str(exc)) from exc
        try:
            return self._parse(response)
        except UpstreamError as exc:
            self.logger.warning("MEXC rejected [{}] status={}: {}", path, exc.upstream_status, exc.message)
            raise

    def _parse(self, response: HttpResponse) -> dict[str, Any]:
        if response.is_json:
            try:
                payload = response.json()
            except ValueError as exc:
                raise UpstreamError(
                    f"Invalid response from MEXC: {response.text[:100]}", response.status
                ) from exc
            if not isinstance(payload, dict):
                if not response.ok:
                    raise UpstreamError(f"MEXC Error {response.status}", response.status)
                return {"data": payload}
            code = payload.get("code")
            if not response.ok or (code is not None and code not in (0, 200)):
                message = payload.get("msg") or payload.get("message") or f"MEXC Error {code or response.status}"
                raise UpstreamError(str(message), response.status)
            return payload

        if not response.ok:
            raise UpstreamError(f"MEXC API Error: {response.text[:100]}", response.status)
        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamError(f"Invalid response from MEXC: {response.text[:100]}", response.status) from exc
        return payload if isinstance(payload, dict) else {"data": payload}

    def _log_error(self, scope: str, exc: Exception) -> None:
        self.logger.error("MEXC relay error [{}]: {}", scope, exc)
