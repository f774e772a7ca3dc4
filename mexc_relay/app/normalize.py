"""Map MEXC spot/futures payloads into the relay DTOs."""

from __future__ import annotations

import math
import uuid
from typing import Any

from app.models import Balance, Order, Position, Trade

DUST_THRESHOLD = 0.00001


def _rows(payload: Any, key: str) -> list[dict[str, Any]]:
    rows = payload.get(key) if isinstance(payload, dict) else None
    if not isinstance(rows, list):
        return []
    return [row for row in rows if isinstance(row, dict)]


def _finite(value: Any) -> float:
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"non-finite number: {value!r}")
    return number


def _num(value: Any, default: float = 0.0) -> float:
    if value in (None, ""):
        return default
    return _finite(value)


def _opt_num(value: Any) -> float | None:
    if value in (None, ""):
        return None
    return _finite(value)


def _opt_int(value: Any) -> int | None:
    if value in (None, ""):
        return None
    return int(value)


def _side(code: Any) -> str:
    return "BUY" if str(code) == "1" else "SELL"


def spot_balances(payload: Any) -> list[Balance]:
    result: list[Balance] = []
    for row in _rows(payload, "balances"):
        balance = Balance(
            asset=str(row.get("asset") or ""),
            available=_num(row.get("free")),
            frozen=_num(row.get("locked")),
        )
        if balance.total > DUST_THRESHOLD:
            result.append(balance)
    return result


def futures_balances(payload: Any) -> list[Balance]:
    return [
        Balance(
            asset=str(row.get("currency") or ""),
            available=_num(row.get("availableBalance")),
            frozen=_num(row.get("frozenBalance")),
        )
        for row in _rows(payload, "data")
    ]


def positions(payload: Any) -> list[Position]:
    result: list[Position] = []
    for row in _rows(payload, "data"):
        position_id = row.get("positionId")
        result.append(
            Position(
                id=str(position_id) if position_id not in (None, "") else str(uuid.uuid4()),
                symbol=str(row.get("symbol") or ""),
                side="LONG" if str(row.get("positionType")) == "1" else "SHORT",
                entry_price=_num(row.get("holdAvgPrice")),
                current_price=_num(row.get("fairPrice")),
                leverage=_num(row.get("leverage")),
                pnl=_num(row.get("unrealizedPnl")),
                margin=_num(row.get("margin")),
                liquidation_price=_opt_num(row.get("liquidatePrice")),
            )
        )
    return result


def open_orders(payload: Any) -> list[Order]:
    return [
        Order(
            order_id=str(row.get("orderId") or ""),
            symbol=str(row.get("symbol") or ""),
            price=_num(row.get("price")),
            quantity=_num(row.get("vol")),
            side=_side(row.get("side")),
            type="LIMIT" if str(row.get("type")) == "1" else "MARKET",
            status="OPEN",
            create_time=_opt_int(row.get("createTime")),
        )
        for row in _rows(payload, "data")
    ]


def trades(payload: Any) -> list[Trade]:
    return [
        Trade(
            id=str(row.get("orderId") or ""),
            symbol=str(row.get("symbol") or ""),
            price=_num(row.get("avgPrice") or row.get("dealAvgPrice")),
            quantity=_num(row.get("vol")),
            side=_side(row.get("side")),
            pnl=_num(row.get("realisedPnl")),
            time=_opt_int(row.get("updateTime")),
        )
        for row in _rows(payload, "data")
    ]
