from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, Optional, TypeVar

from tqdm import tqdm

from envseed.services.config import BatchRunnerConfig


logger = logging.getLogger(__name__)

ItemT = TypeVar("ItemT")
ResultT = TypeVar("ResultT")


class BatchOperationError(RuntimeError):
    """Raised once every item has been attempted and at least one attempt failed."""

    def __init__(self, failures: list[tuple[Any, BaseException]], *, total: int, desc: str) -> None:
        first = failures[0][1]
        super().__init__(f"{desc}: {len(failures)} of {total} operations failed (first error: {first})")
        self.failures = failures
        self.total = total


class BatchRunner:
    """Bounded fan-out of independent remote calls.

    Items are dispatched in fixed-size batches with a pause between batch starts, and at
    most `max_concurrency` operations are in flight at any instant. A failing item never
    cancels its siblings: every item is attempted exactly once, then all failures are
    raised together as `BatchOperationError`.
    """

    def __init__(self, config: Optional[BatchRunnerConfig] = None) -> None:
        self._config = config or BatchRunnerConfig()

    @property
    def config(self) -> BatchRunnerConfig:
        return self._config

    async def run(
        self,
        items: Iterable[ItemT],
        operation: Callable[[ItemT], Awaitable[ResultT]],
        *,
        desc: str = "Platform batch",
    ) -> list[ResultT]:
        """Run `operation` for each item; results come back in input order."""

        pending = list(items)
        if not pending:
            return []

        semaphore = asyncio.Semaphore(self._config.max_concurrency)

        async def _run_one(index: int, item: ItemT) -> tuple[int, bool, Any]:
            async with semaphore:
                try:
                    return (index, True, await operation(item))
                except Exception as exc:
                    return (index, False, exc)

        batch_size = self._config.batch_size
        tasks: list[asyncio.Task[tuple[int, bool, Any]]] = []
        for start in range(0, len(pending), batch_size):
            if start and self._config.min_pause_seconds:
                await asyncio.sleep(self._config.min_pause_seconds)
            tasks.extend(
                asyncio.create_task(_run_one(index, item))
                for index, item in enumerate(pending[start : start + batch_size], start=start)
            )

        results: list[Any] = [None] * len(pending)
        failures: list[tuple[ItemT, BaseException]] = []

        for fut in tqdm(asyncio.as_completed(tasks), total=len(tasks), desc=desc, unit="item", disable=None):
            index, ok, outcome = await fut
            if ok:
                results[index] = outcome
            else:
                failures.append((pending[index], outcome))
                logger.error("%s failed (item=%r): %s", desc, pending[index], outcome)

        if failures:
            raise BatchOperationError(failures, total=len(pending), desc=desc)
        return results
