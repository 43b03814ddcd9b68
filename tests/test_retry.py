from __future__ import annotations

import asyncio

import pytest

from islanders.core.errors import PersistenceError
from islanders.core.retry import with_retry


@pytest.mark.asyncio
async def test_returns_first_successful_result():
    calls = {"n": 0}

    async def op():
        calls["n"] += 1
        if calls["n"] < 3:
            raise ConnectionError("transient")
        return "ok"

    result = await with_retry(op, attempts=3, base_delay=0.0, timeout=1.0)
    assert result == "ok"
    assert calls["n"] == 3


@pytest.mark.asyncio
async def test_raises_persistence_error_after_all_attempts():
    calls = {"n": 0}

    async def op():
        calls["n"] += 1
        raise ConnectionError("down")

    with pytest.raises(PersistenceError) as exc_info:
        await with_retry(op, attempts=2, base_delay=0.0, timeout=1.0, label="save booking X")

    assert calls["n"] == 2
    assert "save booking X" in str(exc_info.value)
    assert isinstance(exc_info.value.__cause__, ConnectionError)


@pytest.mark.asyncio
async def test_slow_call_times_out():
    async def op():
        await asyncio.sleep(1)

    with pytest.raises(PersistenceError):
        await with_retry(op, attempts=1, base_delay=0.0, timeout=0.01)


@pytest.mark.asyncio
async def test_zero_attempts_still_tries_once():
    async def op():
        return 42

    assert await with_retry(op, attempts=0, base_delay=0.0, timeout=1.0) == 42
