"""CLI entrypoint for bigml-parallel — runs a WhizzML script over many resources."""

import asyncio
import logging
import re
import sys
from collections.abc import AsyncIterator
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

import structlog
import typer

from bigml_parallel.config.domain.config import BigMLConfig, ParallelConfig
from bigml_parallel.config.infrastructure.observer import StructlogConfigObserver
from bigml_parallel.config.infrastructure.yaml_loader import YamlConfigLoader
from bigml_parallel.core.errors import BigMLError
from bigml_parallel.execution.application.driver import ParallelExecutionDriver
from bigml_parallel.execution.application.task import ExecutionTaskRunner
from bigml_parallel.execution.domain.errors import InvalidRetryPatternError
from bigml_parallel.execution.domain.input import ExecutionInput
from bigml_parallel.execution.domain.observer import ExecutionObserver
from bigml_parallel.execution.domain.settings import ExecutionSettings
from bigml_parallel.execution.infrastructure.composite_observer import (
    CompositeExecutionObserver,
)
from bigml_parallel.execution.infrastructure.jsonl import JsonLinesWriter, read_ids
from bigml_parallel.execution.infrastructure.observer import StructlogExecutionObserver
from bigml_parallel.execution.infrastructure.progress_observer import (
    ProgressExecutionObserver,
)
from bigml_parallel.resource.domain.id import check_resource_id
from bigml_parallel.resource.infrastructure.client import BigMLClient
from bigml_parallel.resource.infrastructure.observer import StructlogClientObserver
from bigml_parallel.resource.infrastructure.url import redact_api_key
from bigml_parallel.wait.domain.observer import WaitObserver
from bigml_parallel.wait.infrastructure.observer import StructlogWaitObserver

DISTRIBUTION_NAME = "bigml-parallel"

app = typer.Typer(add_completion=False)


def _configure_structlog(log_format: str) -> None:
    """Configure structlog based on the requested format. Logs go to stderr."""
    if log_format == "console":
        renderer: structlog.types.Processor = structlog.dev.ConsoleRenderer()
    elif log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        typer.echo(
            f"Invalid log format: {log_format!r}. Must be 'console' or 'json'.",
            err=True,
        )
        raise typer.Exit(code=1)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.INFO),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def _version_callback(value: bool) -> None:
    if not value:
        return
    try:
        typer.echo(f"{DISTRIBUTION_NAME} {version(DISTRIBUTION_NAME)}")
    except PackageNotFoundError:
        typer.echo(f"{DISTRIBUTION_NAME} (not installed)")
    raise typer.Exit()


def _echo_error(exc: BaseException) -> None:
    """Print ``exc`` and its chain of causes to stderr, credentials redacted."""
    typer.echo(f"Error: {redact_api_key(str(exc))}", err=True)
    cause = exc.__cause__
    while cause is not None:
        typer.echo(f"  caused by: {redact_api_key(str(cause))}", err=True)
        cause = cause.__cause__


def _compile_retry_pattern(pattern: str | None) -> re.Pattern[str] | None:
    if pattern is None:
        return None
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise InvalidRetryPatternError(pattern=pattern, reason=str(exc)) from exc


def _parse_inputs(
    raw_inputs: list[str], observer: ExecutionObserver
) -> list[ExecutionInput]:
    parsed: list[ExecutionInput] = []
    for text in raw_inputs:
        execution_input = ExecutionInput.parse(text)
        if not execution_input.from_json:
            observer.input_coerced_to_string(
                name=execution_input.name, value=str(execution_input.value)
            )
        parsed.append(execution_input)
    return parsed


def _build_execution_observer(log_format: str) -> ExecutionObserver:
    observers: list[ExecutionObserver] = [StructlogExecutionObserver()]
    if log_format != "json" and sys.stderr.isatty():
        observers.append(ProgressExecutionObserver())
    return CompositeExecutionObserver(observers=observers)


def _build_client(config: BigMLConfig, wait_observer: WaitObserver) -> BigMLClient:
    return BigMLClient.from_config(
        config=config,
        observer=StructlogClientObserver(),
        wait_observer=wait_observer,
    )


async def _from_list(resource_ids: list[str]) -> AsyncIterator[str]:
    for resource_id in resource_ids:
        yield resource_id


async def _run(
    config: ParallelConfig,
    settings: ExecutionSettings,
    resource_ids: list[str],
    observer: ExecutionObserver,
) -> None:
    wait_observer = StructlogWaitObserver()
    writer = JsonLinesWriter(stream=sys.stdout)
    async with _build_client(config=config.bigml, wait_observer=wait_observer) as client:
        runner = ExecutionTaskRunner(
            client=client,
            settings=settings,
            policies=config.policies,
            observer=observer,
            wait_observer=wait_observer,
        )
        driver = ParallelExecutionDriver(
            runner=runner,
            max_tasks=settings.max_tasks,
            observer=observer,
            retry_count=settings.retry_count,
        )
        source = _from_list(resource_ids) if resource_ids else read_ids(sys.stdin)
        async for execution in driver.run(source):
            writer.write(execution)


@app.command()
def run(
    script: str = typer.Option(
        ..., "--script", "-s", help="The WhizzML script ID to run"
    ),
    name: str | None = typer.Option(
        None, "--name", "-n", help="The name to use for our execution objects"
    ),
    resources: list[str] | None = typer.Option(
        None,
        "--resource",
        "-r",
        help="Resource IDs to pass to the script (read from stdin if omitted)",
    ),
    resource_input_name: str = typer.Option(
        "resource",
        "--resource-input-name",
        "-R",
        help="The script input name used to pass each resource ID",
    ),
    inputs: list[str] | None = typer.Option(
        None, "--input", "-i", help="Extra script input as name=value (value is JSON)"
    ),
    outputs: list[str] | None = typer.Option(
        None, "--output", "-o", help="Script outputs to include in each execution"
    ),
    max_tasks: int = typer.Option(
        2, "--max-tasks", "-J", min=1, help="How many BigML tasks to use at once"
    ),
    tags: list[str] | None = typer.Option(
        None, "--tag", help="A tag to apply to every execution"
    ),
    retry_on: str | None = typer.Option(
        None,
        "--retry-on",
        help="Retry executions whose failure message matches this regex",
    ),
    retry_count: int = typer.Option(
        0, "--retry-count", min=0, help="How many times to retry a matching failure"
    ),
    config_path: Path | None = typer.Option(
        None, "--config", help="Optional YAML file with credentials and wait policies"
    ),
    log_format: str = typer.Option(
        "console",
        "--log-format",
        help="Log format: 'console' or 'json'",
    ),
    show_version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit",
    ),
) -> None:
    """Execute a WhizzML script on a stream of BigML resources in parallel.

    Each finished execution is written to stdout as one line of JSON.
    """
    _configure_structlog(log_format=log_format)
    try:
        config = YamlConfigLoader(observer=StructlogConfigObserver()).load(
            path=config_path
        )
        observer = _build_execution_observer(log_format=log_format)
        settings = ExecutionSettings(
            script=check_resource_id(script, "script"),
            name=name,
            resource_input_name=resource_input_name,
            inputs=_parse_inputs(raw_inputs=inputs or [], observer=observer),
            outputs=outputs or [],
            tags=tags or [],
            retry_on=_compile_retry_pattern(retry_on),
            retry_count=retry_count,
            max_tasks=max_tasks,
        )
        asyncio.run(
            _run(
                config=config,
                settings=settings,
                resource_ids=resources or [],
                observer=observer,
            )
        )
    except KeyboardInterrupt:
        typer.echo("Interrupted.", err=True)
        sys.exit(1)
    except BigMLError as exc:
        _echo_error(exc)
        sys.exit(1)
    except Exception as exc:  # noqa: BLE001
        _echo_error(exc)
        typer.echo("Unexpected error. Please report this bug.", err=True)
        sys.exit(1)


if __name__ == "__main__":
    app()
