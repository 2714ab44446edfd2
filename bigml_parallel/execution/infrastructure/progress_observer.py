"""ProgressExecutionObserver — renders a Rich progress line for the run on stderr."""

from rich.console import Console
from rich.progress import (
    Progress,
    ProgressColumn,
    SpinnerColumn,
    Task,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)
from rich.text import Text


class _CountsColumn(ProgressColumn):
    """Renders done+inflight with failed and retried counts when non-zero."""

    def render(self, task: Task) -> Text:
        done = int(task.fields.get("done", 0))
        inflight = int(task.fields.get("inflight", 0))
        retried = int(task.fields.get("retried", 0))
        failed = int(task.fields.get("failed", 0))
        text = Text.assemble(
            (str(done), "bright_green"),
            ("+", "dim white"),
            (str(inflight), "grey50"),
            " executions",
        )
        if retried:
            text.append(f"  {retried} retried", style="yellow")
        if failed:
            text.append(f"  {failed} failed", style="red")
        return text


def _make_progress(console: Console) -> Progress:
    """Create a Progress instance with the standard column layout."""
    return Progress(
        SpinnerColumn(),
        TextColumn("{task.description}"),
        _CountsColumn(),
        TimeElapsedColumn(),
        console=console,
        refresh_per_second=10,
        transient=False,
    )


class ProgressExecutionObserver:
    """Renders a single Rich progress row for the whole run on stderr.

    The number of resources is unknown up front since ids are streamed from
    stdin, so the row shows counts rather than a bar.

    Pass ``disabled=True`` to suppress all terminal output (useful in tests).

    Does NOT inherit from ExecutionObserver (structural typing via Protocol).
    """

    def __init__(self, disabled: bool = False) -> None:
        self._disabled = disabled
        self.done = 0
        self.inflight = 0
        self.retried = 0
        self.failed = 0
        self._progress: Progress | None = None
        self._task_id: TaskID | None = None

    def _update(self) -> None:
        if self._progress is None or self._task_id is None:
            return
        self._progress.update(
            self._task_id,
            done=self.done,
            inflight=self.inflight,
            retried=self.retried,
            failed=self.failed,
        )

    def _stop(self) -> None:
        if self._progress is not None:
            self._progress.stop()
        self._progress = None
        self._task_id = None

    def run_started(self, max_tasks: int, retry_count: int) -> None:
        self.done = 0
        self.inflight = 0
        self.retried = 0
        self.failed = 0
        if self._disabled:
            return
        self._progress = _make_progress(console=Console(stderr=True))
        self._task_id = self._progress.add_task(
            description=f"[bold]running[/bold] (max {max_tasks} at once)",
            total=None,
            done=0,
            inflight=0,
            retried=0,
            failed=0,
        )
        self._progress.start()

    def run_completed(self, total_executions: int, elapsed_seconds: float) -> None:
        self._stop()

    def run_aborted(self, reason: str) -> None:
        self._stop()

    def input_coerced_to_string(self, name: str, value: str) -> None:
        pass

    def execution_started(self, resource_id: str) -> None:
        self.inflight += 1
        self._update()

    def execution_created(self, resource_id: str, execution_id: str) -> None:
        pass

    def execution_retry(self, resource_id: str, execution_id: str, reason: str) -> None:
        self.retried += 1
        self._update()

    def execution_completed(self, resource_id: str, execution_id: str) -> None:
        self.inflight = max(0, self.inflight - 1)
        self.done += 1
        self._update()

    def execution_failed(self, resource_id: str, reason: str) -> None:
        # One failure aborts the whole run.
        self.inflight = max(0, self.inflight - 1)
        self.failed += 1
        self._update()
        self._stop()
