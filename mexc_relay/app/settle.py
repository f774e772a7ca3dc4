"""Run awaitables side by side and keep every outcome."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Generic, TypeVar

T = TypeVar("T")


@dataclass(slots=True)
class Settled(Generic[T]):
    value: T | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def settle_all(*awaitables: Awaitable[Any]) -> list[Settled[Any]]:
    """Wait for all awaitables; one failure never cancels the others."""
    results = await asyncio.gather(*awaitables, return_exceptions=True)
    settled: list[Settled[Any]] = []
    for result in results:
        if isinstance(result, asyncio.CancelledError):
            raise result
        if isinstance(result, BaseException):
            settled.append(Settled(error=result))
        else:
            settled.append(Settled(value=result))
    return settled
