"""Tests for the bounded-concurrency driver and its map_unordered core."""

import asyncio
from collections.abc import AsyncIterator

import pytest

from bigml_parallel.config.domain.config import PolicySet
from bigml_parallel.core.errors import BigMLError
from bigml_parallel.execution.application.driver import (
    ParallelExecutionDriver,
    map_unordered,
)
from bigml_parallel.execution.application.task import ExecutionTaskRunner
from bigml_parallel.execution.domain.args import ExecutionArgs
from bigml_parallel.execution.domain.settings import ExecutionSettings
from bigml_parallel.resource.domain.resource import Execution
from bigml_parallel.resource.domain.status import StatusCode
from tests.execution.fake_observer import FakeExecutionObserver
from tests.resource.fake_client import FakeResourceClient, make_execution
from tests.wait.fake_observer import FakeWaitObserver


async def _ids(items: list[str]) -> AsyncIterator[str]:
    for item in items:
        yield item


class FakeRunner:
    """Finishes each resource after its scripted delay, tracking concurrency."""

    def __init__(
        self,
        delays: dict[str, float] | None = None,
        failures: set[str] | None = None,
    ) -> None:
        self._delays = delays or {}
        self._failures = failures or set()
        self.in_flight = 0
        self.max_in_flight = 0
        self.started: list[str] = []
        self.cancelled: list[str] = []

    async def run(self, resource_id: str) -> Execution:
        self.started.append(resource_id)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self._delays.get(resource_id, 0.01))
        except asyncio.CancelledError:
            self.cancelled.append(resource_id)
            raise
        finally:
            self.in_flight -= 1
        if resource_id in self._failures:
            raise BigMLError(f"execution over {resource_id} failed")
        suffix = resource_id.partition("/")[2]
        return make_execution(f"execution/{suffix}", StatusCode.FINISHED)


class SlowCreateClient(FakeResourceClient):
    """Holds every create call open briefly and records how many overlap."""

    def __init__(self) -> None:
        super().__init__()
        self.creating = 0
        self.peak_creating = 0

    async def create(self, args: ExecutionArgs) -> Execution:
        self.creating += 1
        self.peak_creating = max(self.peak_creating, self.creating)
        try:
            await asyncio.sleep(0.01)
            return await super().create(args)
        finally:
            self.creating -= 1


async def _blocked_after(first: int, release: asyncio.Event) -> AsyncIterator[int]:
    yield first
    await release.wait()
    yield first + 1


def _driver(
    runner: FakeRunner,
    max_tasks: int,
    observer: FakeExecutionObserver | None = None,
) -> ParallelExecutionDriver:
    return ParallelExecutionDriver(
        runner=runner,  # type: ignore[arg-type]
        max_tasks=max_tasks,
        observer=observer or FakeExecutionObserver(),
    )


class TestBoundedConcurrency:
    async def test_never_more_than_max_tasks_outstanding(self) -> None:
        runner = FakeRunner()
        ids = [f"dataset/{i}" for i in range(5)]

        results = [e.id async for e in _driver(runner, max_tasks=2).run(_ids(ids))]

        assert runner.max_in_flight == 2
        assert sorted(results) == sorted(f"execution/{i}" for i in range(5))

    async def test_each_input_emitted_exactly_once(self) -> None:
        runner = FakeRunner()
        ids = [f"dataset/{i}" for i in range(20)]

        results = [e.id async for e in _driver(runner, max_tasks=7).run(_ids(ids))]

        assert len(results) == 20
        assert len(set(results)) == 20

    async def test_single_task_runs_sequentially(self) -> None:
        runner = FakeRunner()
        ids = [f"dataset/{i}" for i in range(4)]

        results = [e.id async for e in _driver(runner, max_tasks=1).run(_ids(ids))]

        assert runner.max_in_flight == 1
        assert results == [f"execution/{i}" for i in range(4)]

    async def test_results_in_completion_order(self) -> None:
        runner = FakeRunner(delays={"dataset/slow": 0.1, "dataset/fast": 0.01})

        results = [
            e.id
            async for e in _driver(runner, max_tasks=2).run(
                _ids(["dataset/slow", "dataset/fast"])
            )
        ]

        assert results == ["execution/fast", "execution/slow"]

    async def test_next_input_starts_as_soon_as_any_finishes(self) -> None:
        # With the slow task still running, the third input must not wait for it.
        runner = FakeRunner(delays={"dataset/0": 0.2})
        ids = ["dataset/0", "dataset/1", "dataset/2"]

        results = [e.id async for e in _driver(runner, max_tasks=2).run(_ids(ids))]

        assert results == ["execution/1", "execution/2", "execution/0"]

    async def test_at_most_max_tasks_create_calls_outstanding(self) -> None:
        client = SlowCreateClient()
        runner = ExecutionTaskRunner(
            client=client,
            settings=ExecutionSettings(script="script/1", max_tasks=2),
            policies=PolicySet(),
            observer=FakeExecutionObserver(),
            wait_observer=FakeWaitObserver(),
        )
        driver = ParallelExecutionDriver(
            runner=runner, max_tasks=2, observer=FakeExecutionObserver()
        )
        ids = [f"dataset/{i}" for i in range(6)]

        results = [e.id async for e in driver.run(_ids(ids))]

        assert client.peak_creating == 2
        assert len(results) == 6
        assert sorted(args.inputs[0][1] for args in client.created) == ids

    async def test_empty_input(self) -> None:
        observer = FakeExecutionObserver()

        results = [e async for e in _driver(FakeRunner(), 2, observer).run(_ids([]))]

        assert results == []
        assert observer.runs_completed[0].total_executions == 0


class TestFailure:
    async def test_earlier_results_emitted_before_failure(self) -> None:
        runner = FakeRunner(
            delays={"dataset/2": 0.05, "dataset/3": 0.5},
            failures={"dataset/2"},
        )
        ids = [f"dataset/{i}" for i in range(5)]
        emitted: list[str] = []

        with pytest.raises(BigMLError, match="dataset/2"):
            async for execution in _driver(runner, max_tasks=2).run(_ids(ids)):
                emitted.append(execution.id)

        assert sorted(emitted) == ["execution/0", "execution/1"]
        assert "dataset/4" not in runner.started
        assert runner.cancelled == ["dataset/3"]

    async def test_failure_is_reported_to_observer(self) -> None:
        observer = FakeExecutionObserver()
        runner = FakeRunner(failures={"dataset/0"})

        with pytest.raises(BigMLError):
            async for _ in _driver(runner, 1, observer).run(_ids(["dataset/0"])):
                pass

        assert observer.failed[0].resource_id == "dataset/0"
        assert observer.runs_completed == []
        assert observer.runs_aborted[0].reason == "execution over dataset/0 failed"

    async def test_source_error_aborts_run(self) -> None:
        observer = FakeExecutionObserver()

        async def broken() -> AsyncIterator[str]:
            raise OSError("stdin closed")
            yield

        with pytest.raises(OSError):
            async for _ in _driver(FakeRunner(), 2, observer).run(broken()):
                pass

        assert observer.runs_aborted[0].reason == "stdin closed"
        assert observer.runs_completed == []

    async def test_cancelled_run_is_reported(self) -> None:
        observer = FakeExecutionObserver()
        runner = FakeRunner(delays={"dataset/0": 10})

        async def consume() -> None:
            async for _ in _driver(runner, 2, observer).run(_ids(["dataset/0"])):
                pass

        task = asyncio.create_task(consume())
        await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert observer.runs_aborted[0].reason == "CancelledError"
        assert runner.cancelled == ["dataset/0"]


class TestObserverEvents:
    async def test_run_lifecycle(self) -> None:
        observer = FakeExecutionObserver()
        ids = ["dataset/0", "dataset/1"]

        async for _ in _driver(FakeRunner(), 3, observer).run(_ids(ids)):
            pass

        assert observer.runs_started[0].max_tasks == 3
        assert sorted(observer.started) == ids
        assert len(observer.completed) == 2
        assert observer.runs_completed[0].total_executions == 2


class TestMapUnordered:
    async def test_reads_source_lazily(self) -> None:
        pulled: list[int] = []

        async def source() -> AsyncIterator[int]:
            for i in range(10):
                pulled.append(i)
                yield i

        async def double(x: int) -> int:
            await asyncio.sleep(0)
            return x * 2

        results = map_unordered(source(), double, limit=3)
        first = await anext(results)
        await results.aclose()

        assert first in {0, 2, 4}
        assert len(pulled) <= 4

    async def test_result_yielded_while_source_is_blocked(self) -> None:
        release = asyncio.Event()

        async def tenfold(x: int) -> int:
            return x * 10

        results = map_unordered(_blocked_after(1, release), tenfold, limit=2)
        first = await asyncio.wait_for(anext(results), timeout=1.0)
        await results.aclose()

        assert first == 10
        assert not release.is_set()

    async def test_failure_raised_while_source_is_blocked(self) -> None:
        release = asyncio.Event()

        async def explode(x: int) -> int:
            raise RuntimeError(f"boom {x}")

        results = map_unordered(_blocked_after(1, release), explode, limit=2)

        with pytest.raises(RuntimeError, match="boom 1"):
            await asyncio.wait_for(anext(results), timeout=1.0)

    async def test_source_error_propagates(self) -> None:
        async def broken() -> AsyncIterator[int]:
            yield 1
            raise OSError("stdin closed")

        async def identity(x: int) -> int:
            await asyncio.sleep(0.05)
            return x

        with pytest.raises(OSError, match="stdin closed"):
            async for _ in map_unordered(broken(), identity, limit=2):
                pass

    async def test_limit_must_be_positive(self) -> None:
        async def identity(x: int) -> int:
            return x

        with pytest.raises(ValueError):
            async for _ in map_unordered(_ids(["a"]), identity, limit=0):  # type: ignore[arg-type]
                pass
