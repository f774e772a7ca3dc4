"""Request-scoped DTOs returned to the dashboard."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class Balance:
    asset: str
    available: float
    frozen: float

    @property
    def total(self) -> float:
        return self.available + self.frozen

    def to_dict(self) -> dict[str, Any]:
        return {
            "asset": self.asset,
            "available": self.available,
            "frozen": self.frozen,
            "total": self.total,
        }


@dataclass(slots=True)
class Position:
    id: str
    symbol: str
    side: str
    entry_price: float
    current_price: float
    leverage: float
    pnl: float
    margin: float
    liquidation_price: float | None = None

    @property
    def pnl_percent(self) -> float:
        if not self.margin:
            return 0.0
        return self.pnl / self.margin * 100

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "symbol": self.symbol,
            "side": self.side,
            "entryPrice": self.entry_price,
            "currentPrice": self.current_price,
            "leverage": self.leverage,
            "pnl": self.pnl,
            "pnlPercent": self.pnl_percent,
            "margin": self.margin,
            "liquidationPrice": self.liquidation_price,
        }


@dataclass(slots=True)
class Order:
    order_id: str
    symbol: str
    price: float
    quantity: float
    side: str
    type: str
    status: str
    create_time: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "orderId": self.order_id,
            "symbol": self.symbol,
            "price": self.price,
            "quantity": self.quantity,
            "side": self.side,
            "type": self.type,
            "status": self.status,
            "createTime": self.create_time,
        }


@dataclass(slots=True)
class Trade:
    id: str
    symbol: str
    price: float
    quantity: float
    side: str
    pnl: float
    time: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "symbol": self.symbol,
            "price": self.price,
            "quantity": self.quantity,
            "side": self.side,
            "pnl": self.pnl,
            "time": self.time,
        }


@dataclass(slots=True)
class AccountSnapshot:
    spot_balances: list[Balance] = field(default_factory=list)
    futures_balances: list[Balance] = field(default_factory=list)
    positions: list[Position] = field(default_factory=list)
    orders: list[Order] = field(default_factory=list)
    trades: list[Trade] = field(default_factory=list)

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {
            "spotBalances": [b.to_dict() for b in self.spot_balances],
            "futuresBalances": [b.to_dict() for b in self.futures_balances],
            "positions": [p.to_dict() for p in self.positions],
            "orders": [o.to_dict() for o in self.orders],
            "trades": [t.to_dict() for t in self.trades],
        }


@dataclass(slots=True)
class Ticker:
    symbol: str
    price: float
    change24h: float
    volume: float
    timestamp: int
    source: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "price": self.price,
            "change24h": self.change24h,
            "volume": self.volume,
            "timestamp": self.timestamp,
            "source": self.source,
        }
