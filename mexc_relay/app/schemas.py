"""Request bodies and the AI decision record."""

from __future__ import annotations

import math
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AccountRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    apiKey: Any = None
    secretKey: Any = None
    symbol: str | None = None


class TradeRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    action: Any = None
    apiKey: Any = None
    secretKey: Any = None
    symbol: str = ""
    leverage: int = Field(default=1, ge=1)
    price: float | None = None


class AISettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    aiProvider: str = "gemini"
    geminiApiKey: str | None = None
    openaiApiKey: str | None = None
    deepseekApiKey: str | None = None

    def key_for(self, provider: str) -> str | None:
        key = {
            "gemini": self.geminiApiKey,
            "openai": self.openaiApiKey,
            "deepseek": self.deepseekApiKey,
        }.get(provider)
        return key.strip() if key and key.strip() else None


class MarketData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    symbol: str = "BTCUSDT"
    price: float = 0.0
    change24h: float = 0.0
    volume: float = 0.0
    timestamp: int | None = None
    history: list[Any] = Field(default_factory=list)


class AnalyzeRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    settings: AISettings = Field(default_factory=AISettings)
    marketData: MarketData = Field(default_factory=MarketData)
    currentPositionSide: str = "NONE"


TradeActionName = Literal["LONG", "SHORT", "CLOSE", "WAIT"]


class TradeAction(BaseModel):
    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)

    action: TradeActionName
    leverage: int = 1
    reason: str = ""
    confidence: float = 0.0

    @field_validator("action", mode="before")
    @classmethod
    def _upper_action(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value

    @field_validator("leverage", mode="before")
    @classmethod
    def _round_leverage(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip().lower().rstrip("x")
        if isinstance(value, (str, float)):
            number = float(value)
            if not math.isfinite(number):
                raise ValueError("leverage must be a finite number")
            return int(round(number))
        return value

    @field_validator("reason", mode="before")
    @classmethod
    def _reason_text(cls, value: Any) -> Any:
        return "" if value is None else str(value)

    def clamped(self, max_leverage: int) -> TradeAction:
        return self.model_copy(
            update={
                "leverage": min(max(self.leverage, 1), max_leverage),
                "confidence": min(max(self.confidence, 0.0), 100.0),
            }
        )

    @classmethod
    def pending(cls) -> TradeAction:
        return cls(action="WAIT", leverage=1, reason="Market analysis pending", confidence=50)

    @classmethod
    def failed(cls, diagnostic: str) -> TradeAction:
        return cls(action="WAIT", leverage=1, reason=f"Analysis failed: {diagnostic}", confidence=0)
