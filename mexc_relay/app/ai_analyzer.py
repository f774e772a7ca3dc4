"""Turn market snapshots into LLM trade decisions."""

from __future__ import annotations

import json
from typing import Any

from loguru import logger as default_logger
from pydantic import ValidationError

from app.ai_providers import build_provider
from app.config import AIConfig
from app.errors import ProviderError
from app.http_client import HttpClient
from app.schemas import AISettings, MarketData, TradeAction


def build_prompt(
    market_data: MarketData,
    position_side: str,
    max_leverage: int = 20,
    history_points: int = 10,
) -> str:
    history = market_data.history[-history_points:] if history_points > 0 else []
    return f"""
Analyze the current market data for {market_data.symbol} and decide on a leverage trading action.
Current Price: ${market_data.price}
24h Change: {market_data.change24h}%
24h Volume: {market_data.volume}
Recent Price History: {json.dumps(history)}
Current Active Position: {position_side}

Respond ONLY in JSON format.
If we have an active position, decide if we should CLOSE it based on market shifts.
If we don't have a position, decide whether to go LONG, SHORT, or WAIT.
Maximum recommended leverage is {max_leverage}x for safety.

JSON Structure:
{{
  "action": "LONG" | "SHORT" | "CLOSE" | "WAIT",
  "leverage": number,
  "reason": "string",
  "confidence": number (0-100)
}}
""".strip()


def parse_decision(text: str, max_leverage: int = 20) -> TradeAction:
    """Parse a model reply into a clamped decision.

    Raises ValueError when the reply is not a JSON object with a valid action.
    """
    body = text.strip()
    if body.startswith("```"):
        body = body.strip("`").strip()
        if body.lower().startswith("json"):
            body = body[4:]
    payload = json.loads(body)
    if not isinstance(payload, dict):
        raise ValueError("reply is not a JSON object")
    try:
        decision = TradeAction.model_validate(payload)
    except ValidationError as exc:
        raise ValueError(f"reply does not match decision schema: {exc.error_count()} error(s)") from exc
    return decision.clamped(max_leverage)


class AIAnalyzer:
    def __init__(self, http: HttpClient, config: AIConfig | None = None, logger: Any | None = None) -> None:
        self.http = http
        self.config = config or AIConfig()
        self.logger = logger or default_logger

    async def analyze(
        self,
        settings: AISettings,
        market_data: MarketData,
        position_side: str = "NONE",
    ) -> TradeAction:
        """Never raises: failures come back as a WAIT decision."""
        provider = build_provider(settings, self.config, self.http)
        if provider is None:
            self.logger.info("AI analyze: provider {} has no key, returning pending decision", settings.aiProvider)
            return TradeAction.pending()

        prompt = build_prompt(
            market_data,
            position_side,
            max_leverage=self.config.max_leverage,
            history_points=self.config.history_points,
        )
        try:
            reply = await provider.complete(prompt)
            decision = parse_decision(reply, max_leverage=self.config.max_leverage)
        except (ProviderError, ValueError) as exc:
            self.logger.warning("AI analyze via {} degraded to WAIT: {}", provider.name, exc)
            return TradeAction.failed(str(exc))
        except Exception as exc:  # noqa: BLE001
            self.logger.exception("AI analyze via {} crashed", provider.name)
            return TradeAction.failed(str(exc) or type(exc).__name__)

        self.logger.info(
            "AI decision via {} symbol={} action={} leverage={} confidence={}",
            provider.name,
            market_data.symbol,
            decision.action,
            decision.leverage,
            decision.confidence,
        )
        return decision
