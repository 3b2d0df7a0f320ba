import pytest

from services.freight_quote.polling import poll_until


@pytest.mark.asyncio
async def test_poll_until_returns_first_truthy_result():
    results = iter([None, 0, "found", "later"])
    calls = []

    async def probe():
        calls.append(1)
        return next(results)

    assert await poll_until(probe, max_attempts=5, interval_ms=0) == "found"
    assert len(calls) == 3


@pytest.mark.asyncio
async def test_poll_until_gives_up_after_budget():
    calls = []

    async def probe():
        calls.append(1)
        return None

    assert await poll_until(probe, max_attempts=4, interval_ms=0, description="never") is None
    assert len(calls) == 4


@pytest.mark.asyncio
async def test_poll_until_always_probes_at_least_once():
    calls = []

    async def probe():
        calls.append(1)
        return True

    assert await poll_until(probe, max_attempts=0, interval_ms=0) is True
    assert len(calls) == 1
