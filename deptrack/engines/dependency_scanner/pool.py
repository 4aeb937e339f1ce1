"""Bounded worker pool draining a shared queue of repositories."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence

import structlog

from deptrack.engines.dependency_scanner.models import Failure, FetchOutcome, RepositoryRef
from deptrack.exceptions import FailureKind

log = structlog.get_logger("deptrack.engine")

ProcessFn = Callable[[RepositoryRef], Awaitable[FetchOutcome]]
ProgressFn = Callable[[FetchOutcome], None]

# Close marker; one is queued per worker after the last item.
_CLOSED = None


class WorkerPool:
    """Runs *process* over every item with at most *concurrency* workers.

    Exactly one :class:`FetchOutcome` is produced per input item. Outcome
    order is unspecified. There is no cancellation: once started, every item
    runs to completion.
    """

    def __init__(self, process: ProcessFn, concurrency: int) -> None:
        if concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {concurrency}")
        self._process = process
        self.concurrency = concurrency

    async def run(
        self,
        items: Sequence[RepositoryRef],
        on_complete: ProgressFn | None = None,
    ) -> list[FetchOutcome]:
        if not items:
            return []

        workers = min(self.concurrency, len(items))
        work: asyncio.Queue[RepositoryRef | None] = asyncio.Queue()
        results: asyncio.Queue[FetchOutcome] = asyncio.Queue(maxsize=len(items))

        for item in items:
            work.put_nowait(item)
        for _ in range(workers):
            work.put_nowait(_CLOSED)

        log.debug("pool.started", items=len(items), workers=workers)
        # Barrier: every worker must observe the close marker before results are read.
        await asyncio.gather(*(self._worker(i, work, results, on_complete) for i in range(workers)))

        outcomes: list[FetchOutcome] = []
        while not results.empty():
            outcomes.append(results.get_nowait())
        log.debug("pool.drained", outcomes=len(outcomes))
        return outcomes

    async def _worker(
        self,
        worker_id: int,
        work: asyncio.Queue[RepositoryRef | None],
        results: asyncio.Queue[FetchOutcome],
        on_complete: ProgressFn | None,
    ) -> None:
        while True:
            item = await work.get()
            if item is _CLOSED:
                return
            tokens = structlog.contextvars.bind_contextvars(
                worker=worker_id,
                repository=item.full_name,
            )
            try:
                outcome = await self._process(item)
            except Exception as exc:
                log.error("pool.worker_crashed", error=str(exc), exc_info=True)
                outcome = FetchOutcome(
                    repository=item,
                    failure=Failure(kind=FailureKind.INTERNAL, message=repr(exc)),
                )
            finally:
                structlog.contextvars.reset_contextvars(**tokens)
            await results.put(outcome)
            if on_complete is not None:
                on_complete(outcome)
