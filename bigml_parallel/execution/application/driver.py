"""ParallelExecutionDriver — keeps at most N executions in flight over a stream of ids."""

import asyncio
import time
from collections.abc import AsyncIterable, AsyncIterator, Callable, Coroutine
from typing import Any

from bigml_parallel.execution.application.task import ExecutionTaskRunner
from bigml_parallel.execution.domain.observer import ExecutionObserver
from bigml_parallel.resource.domain.resource import Resource

_EXHAUSTED: Any = object()


async def _next_item[T](source: AsyncIterator[T]) -> T:
    try:
        return await anext(source)
    except StopAsyncIteration:
        return _EXHAUSTED


async def map_unordered[T, R](
    items: AsyncIterable[T],
    func: Callable[[T], Coroutine[Any, Any, R]],
    limit: int,
) -> AsyncIterator[R]:
    """
    Apply ``func`` to every item with at most ``limit`` calls outstanding.

    Results are yielded in completion order. The next item is read only
    while fewer than ``limit`` calls are outstanding, so the source is read
    lazily and may be unbounded. A read that is still waiting on the source
    never holds back a result or a failure from a call already running.

    When a call fails, results that completed alongside it are yielded first,
    then the first failure is raised and every outstanding call is cancelled.
    """
    if limit < 1:
        raise ValueError(f"limit must be at least 1, got {limit}")

    source = aiter(items)
    pending: set[asyncio.Task[R]] = set()
    reader: asyncio.Task[T] | None = None
    exhausted = False
    try:
        while True:
            if reader is None and not exhausted and len(pending) < limit:
                reader = asyncio.create_task(_next_item(source))

            waiting: set[asyncio.Future[Any]] = set(pending)
            if reader is not None:
                waiting.add(reader)
            if not waiting:
                return

            done, _ = await asyncio.wait(waiting, return_when=asyncio.FIRST_COMPLETED)
            failure: BaseException | None = None
            for task in [t for t in pending if t in done]:
                pending.discard(task)
                error = task.exception()
                if error is None:
                    yield task.result()
                elif failure is None:
                    failure = error
            if failure is not None:
                raise failure

            if reader is not None and reader in done:
                read, reader = reader, None
                item = read.result()
                if item is _EXHAUSTED:
                    exhausted = True
                else:
                    pending.add(asyncio.create_task(func(item)))
    finally:
        outstanding: list[asyncio.Future[Any]] = [*pending]
        if reader is not None:
            outstanding.append(reader)
        for task in outstanding:
            task.cancel()
        if outstanding:
            await asyncio.gather(*outstanding, return_exceptions=True)


class ParallelExecutionDriver:
    """Runs the script over every resource id, yielding finished executions."""

    def __init__(
        self,
        runner: ExecutionTaskRunner,
        max_tasks: int,
        observer: ExecutionObserver,
        retry_count: int = 0,
    ) -> None:
        self._runner = runner
        self._max_tasks = max_tasks
        self._observer = observer
        self._retry_count = retry_count

    async def run(self, resource_ids: AsyncIterable[str]) -> AsyncIterator[Resource]:
        """
        Yield each finished execution as soon as it completes.

        The first execution that fails for good aborts the run: it is raised
        from this generator after anything already finished has been yielded.
        Any error or cancellation that ends the run early is reported as
        ``run_aborted`` before it propagates.
        """
        self._observer.run_started(
            max_tasks=self._max_tasks, retry_count=self._retry_count
        )
        start = time.monotonic()
        total = 0
        try:
            async for execution in map_unordered(
                resource_ids, self._run_one, self._max_tasks
            ):
                total += 1
                yield execution
        except (Exception, asyncio.CancelledError) as exc:
            self._observer.run_aborted(reason=str(exc) or type(exc).__name__)
            raise
        self._observer.run_completed(
            total_executions=total,
            elapsed_seconds=round(time.monotonic() - start, 3),
        )

    async def _run_one(self, resource_id: str) -> Resource:
        self._observer.execution_started(resource_id=resource_id)
        try:
            execution = await self._runner.run(resource_id)
        except Exception as exc:
            self._observer.execution_failed(resource_id=resource_id, reason=str(exc))
            raise
        self._observer.execution_completed(
            resource_id=resource_id, execution_id=execution.id
        )
        return execution
