"""Configuration loading and validation."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

CONFIG_ENV_VAR = "MEXC_RELAY_CONFIG"


class ServerConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    host: str = "127.0.0.1"
    port: int = Field(default=5000, ge=1, le=65535)


class HttpConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    timeout_sec: float = Field(default=10.0, gt=0)


class MexcConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    spot_base_url: str = "https://api.mexc.com"
    futures_base_url: str = "https://fapi.mexc.com"


class TickerConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    mexc_url: str = "https://api.mexc.com/api/v3/ticker/24hr"
    binance_url: str = "https://api.binance.com/api/v3/ticker/24hr"
    allow_synthetic: bool = True


class RateLimitConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    window_sec: float = Field(default=60.0, gt=0)
    max_requests: int = Field(default=60, ge=1)
    sweep_interval_sec: float = Field(default=60.0, gt=0)


class AIConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta/models"
    gemini_model: str = "gemini-1.5-flash"
    openai_url: str = "https://api.openai.com/v1/chat/completions"
    openai_model: str = "gpt-4o"
    deepseek_url: str = "https://api.deepseek.com/chat/completions"
    deepseek_model: str = "deepseek-chat"
    max_leverage: int = Field(default=20, ge=1)
    history_points: int = Field(default=10, ge=0)


class LoggingConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    dir: str = "logs"
    level: str = Field(default="INFO", pattern=r"^(TRACE|DEBUG|INFO|SUCCESS|WARNING|ERROR|CRITICAL)$")


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    server: ServerConfig = Field(default_factory=ServerConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)
    mexc: MexcConfig = Field(default_factory=MexcConfig)
    ticker: TickerConfig = Field(default_factory=TickerConfig)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    ai: AIConfig = Field(default_factory=AIConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load configuration from YAML file and validate schema.

    Without an explicit path, ``MEXC_RELAY_CONFIG`` (also read from ``.env``)
    names the file; with neither, built-in defaults are used.
    """
    load_dotenv(find_dotenv(usecwd=True))
    if path is None:
        path = os.getenv(CONFIG_ENV_VAR) or None
    if path is None:
        return AppConfig()

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file '{config_path}' not found. Copy config.yml.example to config.yml first."
        )

    with config_path.open("r", encoding="utf-8") as fh:
        raw_data = yaml.safe_load(fh) or {}

    try:
        return AppConfig.model_validate(raw_data)
    except ValidationError as exc:
        raise ValueError(f"Invalid config '{config_path}': {exc}") from exc
