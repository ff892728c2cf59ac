"""Batched, paced fan-out of async work items."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class BatchScheduler:
    """Run a worker over items in consecutive concurrent batches.

    Items of one batch run concurrently; the scheduler waits
    ``inter_batch_delay`` seconds between batches. Results keep input order,
    and an item whose worker raises yields ``None`` without affecting its
    siblings.
    """

    def __init__(
        self,
        batch_size: int,
        inter_batch_delay: float = 0.0,
        name: str = "batch",
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        if inter_batch_delay < 0:
            raise ValueError("inter_batch_delay must be non-negative")
        self.batch_size = batch_size
        self.inter_batch_delay = inter_batch_delay
        self.name = name
        self._sleep = sleep or asyncio.sleep

        self._stats = {"runs": 0, "batches": 0, "items": 0, "worker_errors": 0}

    async def run(self, items: Sequence[T], worker: Callable[[T], Awaitable[R]]) -> list[R | None]:
        return await run_batched(
            items,
            self.batch_size,
            worker,
            self.inter_batch_delay,
            sleep=self._sleep,
            stats=self._stats,
            name=self.name,
        )

    def get_stats(self) -> dict[str, int | float | str]:
        return {
            "name": self.name,
            "batch_size": self.batch_size,
            "inter_batch_delay": self.inter_batch_delay,
            **self._stats,
        }


async def run_batched(
    items: Sequence[T],
    batch_size: int,
    worker: Callable[[T], Awaitable[R]],
    inter_batch_delay: float = 0.0,
    *,
    sleep: Callable[[float], Awaitable[None]] | None = None,
    stats: dict[str, int] | None = None,
    name: str = "batch",
) -> list[R | None]:
    """Apply ``worker`` to ``items`` in batches of ``batch_size``.

    Returns one result per item, in input order, with ``None`` for items
    whose worker raised.
    """
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")

    sleep = sleep or asyncio.sleep
    stats = stats if stats is not None else {"runs": 0, "batches": 0, "items": 0, "worker_errors": 0}
    stats["runs"] += 1

    results: list[R | None] = []
    for start in range(0, len(items), batch_size):
        if start > 0 and inter_batch_delay > 0:
            await sleep(inter_batch_delay)

        batch = items[start : start + batch_size]
        stats["batches"] += 1
        stats["items"] += len(batch)

        outcomes = await asyncio.gather(*(worker(item) for item in batch), return_exceptions=True)
        for item, outcome in zip(batch, outcomes):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, Exception):
                stats["worker_errors"] += 1
                logger.warning(f"⚠️ {name} worker failed for {item!r}: {outcome}")
                results.append(None)
            else:
                results.append(outcome)

    return results
