"""Account snapshot and order placement on behalf of the dashboard."""

from __future__ import annotations

from typing import Any, Callable

from loguru import logger as default_logger

from app import normalize
from app.credentials import validate_api_keys
from app.errors import InvalidRequestError
from app.mexc_client import MexcRelayClient
from app.models import AccountSnapshot
from app.settle import Settled, settle_all

ACTION_SIDES = {"LONG": 1, "SHORT": 2, "CLOSE": 3}
INVALID_KEYS_MESSAGE = "Invalid MEXC API keys provided"


class RelayService:
    def __init__(self, client: MexcRelayClient, logger: Any | None = None) -> None:
        self.client = client
        self.logger = logger or default_logger

    async def account_snapshot(self, api_key: Any, secret_key: Any) -> AccountSnapshot:
        """Fetch five account categories at once; a failed category comes back empty."""
        if not validate_api_keys(api_key, secret_key):
            raise InvalidRequestError(INVALID_KEYS_MESSAGE)

        spot, futures, positions, orders, history = await settle_all(
            self.client.get_spot_account(api_key, secret_key),
            self.client.get_futures_assets(api_key, secret_key),
            self.client.get_open_positions(api_key, secret_key),
            self.client.get_open_orders(api_key, secret_key),
            self.client.get_history_orders(api_key, secret_key),
        )

        return AccountSnapshot(
            spot_balances=self._category("spot_balances", spot, normalize.spot_balances),
            futures_balances=self._category("futures_balances", futures, normalize.futures_balances),
            positions=self._category("positions", positions, normalize.positions),
            orders=self._category("orders", orders, normalize.open_orders),
            trades=self._category("trades", history, normalize.trades),
        )

    async def place_trade(
        self,
        action: Any,
        api_key: Any,
        secret_key: Any,
        symbol: str,
        leverage: int,
    ) -> dict[str, Any]:
        if not validate_api_keys(api_key, secret_key):
            raise InvalidRequestError(INVALID_KEYS_MESSAGE)
        side = ACTION_SIDES.get(action) if isinstance(action, str) else None
        if side is None:
            raise InvalidRequestError("Invalid trade action")
        if not symbol:
            raise InvalidRequestError("Symbol is required")

        self.logger.info("Placing {} order symbol={} side={} leverage={}", action, symbol, side, leverage)
        return await self.client.create_order(api_key, secret_key, symbol=symbol, side=side, leverage=leverage)

    def _category(self, name: str, outcome: Settled[Any], mapper: Callable[[Any], list]) -> list:
        if not outcome.ok:
            self.logger.warning("Account snapshot: {} unavailable: {}", name, outcome.error)
            return []
        try:
            return mapper(outcome.value)
        except (TypeError, ValueError) as exc:
            self.logger.warning("Account snapshot: {} payload not understood: {}", name, exc)
            return []
