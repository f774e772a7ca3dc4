"""Unit tests for app.settle."""

from __future__ import annotations

import asyncio

from app.settle import settle_all


async def _value(value, delay: float = 0.0):
    await asyncio.sleep(delay)
    return value


async def _boom(message: str):
    raise RuntimeError(message)


def test_keeps_order_and_each_outcome() -> None:
    results = asyncio.run(settle_all(_value("a", 0.01), _boom("bad"), _value("c")))

    assert [r.ok for r in results] == [True, False, True]
    assert results[0].value == "a"
    assert str(results[1].error) == "bad"
    assert results[2].value == "c"


def test_failure_does_not_cancel_slower_siblings() -> None:
    finished: list[str] = []

    async def slow() -> str:
        await asyncio.sleep(0.02)
        finished.append("slow")
        return "done"

    results = asyncio.run(settle_all(_boom("fast failure"), slow()))

    assert finished == ["slow"]
    assert results[1].value == "done"


def test_empty() -> None:
    assert asyncio.run(settle_all()) == []
