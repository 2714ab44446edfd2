"""Tests for wait_for_resource — the status-polling specialisation of the wait engine."""

from unittest.mock import AsyncMock, patch

import pytest

from bigml_parallel.core.errors import BigMLError, ErrorKind
from bigml_parallel.resource.application.poll import DEFAULT_POLL_POLICY, wait_for_resource
from bigml_parallel.resource.domain.errors import WaitFailedError
from bigml_parallel.resource.domain.resource import Execution
from bigml_parallel.resource.domain.status import StatusCode
from bigml_parallel.wait.domain.policy import BackoffType, WaitPolicy
from tests.resource.fake_client import make_execution
from tests.wait.fake_observer import FakeWaitObserver

SLEEP = "bigml_parallel.wait.application.engine.asyncio.sleep"


class ScriptedFetch:
    """Returns (or raises) the scripted items in order, repeating the last."""

    def __init__(self, items: list[Execution | Exception]) -> None:
        self._items = items
        self.calls = 0

    async def __call__(self, resource_id: str) -> Execution:
        item = self._items[min(self.calls, len(self._items) - 1)]
        self.calls += 1
        if isinstance(item, Exception):
            raise item
        return item


def _snapshot(code: StatusCode, message: str = "") -> Execution:
    return make_execution("execution/1", code, message)


class TestDefaultPollPolicy:
    def test_exponential_ten_seconds_six_errors(self) -> None:
        assert DEFAULT_POLL_POLICY == WaitPolicy(
            retry_interval_seconds=10,
            backoff_type=BackoffType.EXPONENTIAL,
            allowed_errors=6,
        )


class TestWaitForResource:
    @patch(SLEEP, new_callable=AsyncMock)
    async def test_returns_resource_once_finished(self, mock_sleep: AsyncMock) -> None:
        fetch = ScriptedFetch(
            [
                _snapshot(StatusCode.QUEUED),
                _snapshot(StatusCode.IN_PROGRESS),
                _snapshot(StatusCode.FINISHED),
            ]
        )

        result = await wait_for_resource(
            fetch=fetch, resource_id="execution/1", observer=FakeWaitObserver()
        )

        assert result.status.code is StatusCode.FINISHED
        assert fetch.calls == 3

    @patch(SLEEP, new_callable=AsyncMock)
    async def test_remote_failure_raises_wait_failed(self, mock_sleep: AsyncMock) -> None:
        fetch = ScriptedFetch([_snapshot(StatusCode.FAULTY, "out of memory")])

        with pytest.raises(WaitFailedError) as exc_info:
            await wait_for_resource(
                fetch=fetch, resource_id="execution/1", observer=FakeWaitObserver()
            )

        assert exc_info.value.message == "out of memory"
        assert str(exc_info.value) == (
            "https://bigml.com/dashboard/execution/1 failed (out of memory)"
        )
        assert fetch.calls == 1
        mock_sleep.assert_not_called()

    @patch(SLEEP, new_callable=AsyncMock)
    async def test_unknown_status_is_a_failure(self, mock_sleep: AsyncMock) -> None:
        fetch = ScriptedFetch([_snapshot(StatusCode.UNKNOWN)])

        with pytest.raises(WaitFailedError):
            await wait_for_resource(
                fetch=fetch, resource_id="execution/1", observer=FakeWaitObserver()
            )

    @patch(SLEEP, new_callable=AsyncMock)
    async def test_fetch_errors_are_retried(self, mock_sleep: AsyncMock) -> None:
        # Even a normally permanent fetch error is retried while polling.
        fetch = ScriptedFetch(
            [
                BigMLError("bad gateway", kind=ErrorKind.UNEXPECTED_HTTP_STATUS),
                _snapshot(StatusCode.FINISHED),
            ]
        )

        result = await wait_for_resource(
            fetch=fetch, resource_id="execution/1", observer=FakeWaitObserver()
        )

        assert result.status.code is StatusCode.FINISHED
        assert fetch.calls == 2

    @patch(SLEEP, new_callable=AsyncMock)
    async def test_fetch_errors_beyond_budget_are_raised(
        self, mock_sleep: AsyncMock
    ) -> None:
        error = BigMLError("unreachable", kind=ErrorKind.CONNECTION)
        fetch = ScriptedFetch([error])

        with pytest.raises(BigMLError):
            await wait_for_resource(
                fetch=fetch,
                resource_id="execution/1",
                observer=FakeWaitObserver(),
                policy=WaitPolicy(allowed_errors=1),
            )

        assert fetch.calls == 2


class TestProgressCallback:
    @patch(SLEEP, new_callable=AsyncMock)
    async def test_called_with_every_snapshot(self, mock_sleep: AsyncMock) -> None:
        seen: list[StatusCode] = []
        fetch = ScriptedFetch(
            [_snapshot(StatusCode.STARTED), _snapshot(StatusCode.FINISHED)]
        )

        await wait_for_resource(
            fetch=fetch,
            resource_id="execution/1",
            observer=FakeWaitObserver(),
            progress=lambda resource: seen.append(resource.status.code),
        )

        assert seen == [StatusCode.STARTED, StatusCode.FINISHED]

    @patch(SLEEP, new_callable=AsyncMock)
    async def test_callback_error_is_permanent(self, mock_sleep: AsyncMock) -> None:
        def explode(resource: Execution) -> None:
            raise RuntimeError("callback bug")

        fetch = ScriptedFetch([_snapshot(StatusCode.STARTED)])

        with pytest.raises(RuntimeError, match="callback bug"):
            await wait_for_resource(
                fetch=fetch,
                resource_id="execution/1",
                observer=FakeWaitObserver(),
                progress=explode,
            )

        assert fetch.calls == 1
        mock_sleep.assert_not_called()
