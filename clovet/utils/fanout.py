# clovet/utils/fanout.py
from __future__ import annotations
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar
import asyncio
import logging

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


async def bounded_map(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    *,
    limit: int = 1,
    timeout: Optional[float] = None,
) -> List[Optional[R]]:
    """
    Run `worker` over `items` with at most `limit` calls in flight.

    - Results come back in input order, whatever the completion order.
    - A worker that raises or exceeds `timeout` yields None for its slot;
      the remaining items still run.
    - limit=1 runs the items strictly one after another.
    """
    sem = asyncio.Semaphore(max(1, limit))

    async def _run(item: T) -> Optional[R]:
        async with sem:
            try:
                if timeout:
                    return await asyncio.wait_for(worker(item), timeout=timeout)
                return await worker(item)
            except asyncio.TimeoutError:
                logger.error(f"Fan-out worker timed out after {timeout}s for item={item!r}")
            except Exception as e:
                logger.error(f"Fan-out worker failed for item={item!r}: {e}")
            return None

    return list(await asyncio.gather(*(_run(it) for it in items)))
