"""Tests for per-session turn supersession."""

from __future__ import annotations

import asyncio

import pytest

from vibeframe.engine.turns import TurnRegistry
from vibeframe.errors import TurnSuperseded


def test_newer_turn_supersedes_in_flight_turn():
    async def scenario():
        registry = TurnRegistry()
        started = asyncio.Event()

        async def slow():
            started.set()
            await asyncio.sleep(10)
            return "slow"

        async def fast():
            return "fast"

        first = asyncio.ensure_future(registry.run("s1", slow))
        await started.wait()
        assert registry.in_flight("s1")

        second = await registry.run("s1", fast)
        with pytest.raises(TurnSuperseded):
            await first
        return second, registry.in_flight("s1")

    second, still_running = asyncio.run(scenario())
    assert second == "fast"
    assert not still_running


def test_burst_of_submissions_runs_only_the_latest():
    async def scenario():
        registry = TurnRegistry()
        running = set()
        seen = []
        started = asyncio.Event()

        async def turn(name, delay):
            running.add(name)
            seen.append(sorted(running))
            started.set()
            try:
                await asyncio.sleep(delay)
                return name
            finally:
                running.discard(name)

        a = asyncio.ensure_future(registry.run("s1", lambda: turn("A", 10)))
        await started.wait()
        b = asyncio.ensure_future(registry.run("s1", lambda: turn("B", 0.01)))
        c = asyncio.ensure_future(registry.run("s1", lambda: turn("C", 0.01)))
        results = await asyncio.gather(a, b, c, return_exceptions=True)
        return results, seen, registry.in_flight("s1")

    results, seen, still_running = asyncio.run(scenario())
    assert isinstance(results[0], TurnSuperseded)
    assert isinstance(results[1], TurnSuperseded)
    assert results[2] == "C"
    # Never two turns at once, and the superseded B never starts
    assert seen == [["A"], ["C"]]
    assert not still_running


def test_sessions_do_not_interfere():
    async def scenario():
        registry = TurnRegistry()

        async def answer(value):
            await asyncio.sleep(0.01)
            return value

        return await asyncio.gather(
            registry.run("a", lambda: answer("A")),
            registry.run("b", lambda: answer("B")),
        )

    assert asyncio.run(scenario()) == ["A", "B"]


def test_errors_propagate():
    async def scenario():
        async def failing():
            raise ValueError("boom")

        await TurnRegistry().run("s1", failing)

    with pytest.raises(ValueError, match="boom"):
        asyncio.run(scenario())
