import asyncio
import logging
import sys
from typing import Any, Awaitable, Callable, Iterable, Optional


class AsyncRateLimiter:
    """
    A simple rate limiter to enforce a maximum number of requests per second.
    """
    def __init__(self, max_rps: float):
        self.max_rps = max_rps
        self.min_interval = 1.0 / max_rps
        self.last_request_time: Optional[float] = None
        self.lock = asyncio.Lock()

    async def wait(self):
        """
        Wait until it's safe to make the next request.
        """
        async with self.lock:
            loop = asyncio.get_running_loop()
            if self.last_request_time is not None:
                elapsed = loop.time() - self.last_request_time
                if elapsed < self.min_interval:
                    await asyncio.sleep(self.min_interval - elapsed)
            self.last_request_time = loop.time()


async def process_items_concurrently_async(
    items: Iterable[Any],
    process_func: Callable[[Any], Awaitable[Any]],
    max_concurrent_tasks: int = 5,
    logger: Optional[logging.Logger] = None,
) -> list[Any]:
    """
    Processes a list of items concurrently using asyncio with a semaphore.

    A failing item is logged and dropped; the others still complete.

    Args:
        items: An iterable of items to process.
        process_func: An async function that takes one item and returns a result.
        max_concurrent_tasks: The maximum number of concurrent tasks.
                              Set to 1 for serial execution.
        logger: A logger instance for structured logging.

    Returns:
        A list of results in the order of `items`. None results and failed
        items are filtered out.
    """
    semaphore = asyncio.Semaphore(max_concurrent_tasks)

    async def sem_task(item: Any):
        async with semaphore:
            try:
                return await process_func(item)
            except Exception as e:
                error_message = f"Error processing item {item!r}: {e}"
                if logger:
                    logger.error(error_message)
                else:
                    print(error_message, file=sys.stderr)
                return None

    # Failures are caught inside sem_task, so gather returns None for them.
    all_results = await asyncio.gather(*(sem_task(item) for item in items))

    return [res for res in all_results if res is not None]
