import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from musigraph.utils.concurrency_helpers import (
    AsyncRateLimiter,
    process_items_concurrently_async,
)


# --- Tests for process_items_concurrently_async ---

async def sample_async_worker(x):
    """Squares even numbers, yields nothing for odd ones, fails on negatives."""
    await asyncio.sleep(0)
    if x < 0:
        raise ValueError("Negative numbers not allowed")
    if x % 2 == 0:
        return x * x
    return None


@pytest.mark.asyncio
async def test_process_items_concurrently_async_keeps_item_order():
    results = await process_items_concurrently_async(
        [6, 1, 4, 3, 2], sample_async_worker, max_concurrent_tasks=2
    )
    assert results == [36, 16, 4]


@pytest.mark.asyncio
async def test_process_items_concurrently_async_logs_and_skips_failures():
    logger = MagicMock()

    results = await process_items_concurrently_async(
        [2, -3, 4], sample_async_worker, max_concurrent_tasks=3, logger=logger
    )

    assert results == [4, 16]
    logger.error.assert_called_once()
    assert "Negative numbers not allowed" in logger.error.call_args.args[0]


@pytest.mark.asyncio
async def test_process_items_concurrently_async_without_logger_reports_to_stderr(capsys):
    await process_items_concurrently_async([-1], sample_async_worker)

    captured = capsys.readouterr()
    assert "Error processing item -1" in captured.err


@pytest.mark.asyncio
async def test_process_items_concurrently_async_respects_concurrency_limit():
    running = 0
    peak = 0

    async def tracked(item):
        nonlocal running, peak
        running += 1
        peak = max(peak, running)
        await asyncio.sleep(0.01)
        running -= 1
        return item

    results = await process_items_concurrently_async(range(6), tracked, max_concurrent_tasks=2)

    assert results == [0, 1, 2, 3, 4, 5]
    assert peak == 2


# --- Tests for AsyncRateLimiter ---

@pytest.mark.asyncio
async def test_async_rate_limiter_spaces_requests():
    limiter = AsyncRateLimiter(max_rps=2)

    with patch(
        "musigraph.utils.concurrency_helpers.asyncio.sleep", new_callable=AsyncMock
    ) as mock_sleep:
        await limiter.wait()
        await limiter.wait()

    # The first call never waits; the second waits for the remaining interval.
    assert mock_sleep.call_count == 1
    delay = mock_sleep.call_args.args[0]
    assert 0 < delay <= 0.5
