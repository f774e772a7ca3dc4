"""LLM completion providers that return the raw JSON reply text."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any
from urllib.parse import quote

from app.config import AIConfig
from app.errors import ProviderError
from app.http_client import HttpClient, HttpResponse, TransportError
from app.schemas import AISettings


class AIProvider(ABC):
    name: str = ""

    def __init__(self, http: HttpClient, api_key: str, model: str) -> None:
        self.http = http
        self.api_key = api_key
        self.model = model

    @abstractmethod
    async def complete(self, prompt: str) -> str:
        """Send prompt, return the text expected to hold a JSON object."""

    async def _post(self, url: str, payload: dict[str, Any], headers: dict[str, str] | None = None) -> Any:
        try:
            response = await self.http.post_json(url, payload, headers=headers)
        except TransportError as exc:
            raise ProviderError(f"{self.name} unreachable: {exc}") from exc
        if not response.ok:
            raise ProviderError(f"{self.name} HTTP {response.status}: {_error_message(response)}")
        try:
            return response.json()
        except ValueError as exc:
            raise ProviderError(f"{self.name} returned non-JSON body") from exc


class GeminiProvider(AIProvider):
    name = "gemini"

    def __init__(self, http: HttpClient, api_key: str, model: str, base_url: str) -> None:
        super().__init__(http, api_key, model)
        self.base_url = base_url.rstrip("/")

    async def complete(self, prompt: str) -> str:
        url = f"{self.base_url}/{self.model}:generateContent?key={quote(self.api_key)}"
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"responseMimeType": "application/json"},
        }
        data = await self._post(url, payload)
        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ProviderError("gemini reply has no candidate text") from exc
        if not isinstance(text, str) or not text.strip():
            raise ProviderError("gemini reply has no candidate text")
        return text


class OpenAIProvider(AIProvider):
    """Chat-completions API; DeepSeek speaks the same dialect."""

    name = "openai"

    def __init__(self, http: HttpClient, api_key: str, model: str, url: str) -> None:
        super().__init__(http, api_key, model)
        self.url = url

    async def complete(self, prompt: str) -> str:
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "response_format": {"type": "json_object"},
        }
        data = await self._post(self.url, payload, headers={"Authorization": f"Bearer {self.api_key}"})
        try:
            text = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ProviderError(f"{self.name} reply has no message content") from exc
        if not isinstance(text, str) or not text.strip():
            raise ProviderError(f"{self.name} reply has no message content")
        return text


class DeepSeekProvider(OpenAIProvider):
    name = "deepseek"


def build_provider(settings: AISettings, config: AIConfig, http: HttpClient) -> AIProvider | None:
    """Pick the configured provider; None when unknown or its key is missing."""
    name = (settings.aiProvider or "").strip().lower()
    key = settings.key_for(name)
    if key is None:
        return None
    if name == "gemini":
        return GeminiProvider(http, key, config.gemini_model, config.gemini_base_url)
    if name == "openai":
        return OpenAIProvider(http, key, config.openai_model, config.openai_url)
    if name == "deepseek":
        return DeepSeekProvider(http, key, config.deepseek_model, config.deepseek_url)
    return None


def _error_message(response: HttpResponse) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:100]
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str):
            return error
        if body.get("message"):
            return str(body["message"])
    return response.text[:100]
