"""BigMLClient — an asynchronous httpx client for BigML's REST API."""

from typing import Any, Self
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError

from bigml_parallel.config.domain.config import BigMLConfig
from bigml_parallel.core.errors import BigMLError
from bigml_parallel.execution.domain.args import ExecutionArgs
from bigml_parallel.resource.application.poll import (
    DEFAULT_POLL_POLICY,
    ProgressCallback,
    wait_for_resource,
)
from bigml_parallel.resource.domain.observer import ClientObserver
from bigml_parallel.resource.domain.resource import (
    Execution,
    Resource,
    resource_class_for,
)
from bigml_parallel.resource.infrastructure.errors import (
    CouldNotAccessUrlError,
    InvalidResponseError,
    response_to_error,
)
from bigml_parallel.resource.infrastructure.url import url_without_api_key
from bigml_parallel.wait.application.engine import wait
from bigml_parallel.wait.domain.observer import WaitObserver
from bigml_parallel.wait.domain.policy import WaitPolicy
from bigml_parallel.wait.domain.status import (
    FailedTemporarily,
    Finished,
    Waiting,
    WaitStatus,
)

DEFAULT_DOMAIN = "bigml.io"

# A freshly finished dataset can still answer /download with a JSON "not ready"
# message for several minutes.
DEFAULT_DOWNLOAD_POLICY = WaitPolicy(timeout_seconds=10 * 60)


class BigMLClient:
    """A client connection to BigML.

    Every method makes a single attempt unless it says otherwise; retries are
    layered on top with the wait engine. Credentials travel in the query
    string, so every URL that reaches an error or a log event is redacted first.
    """

    def __init__(
        self,
        username: str,
        api_key: str,
        observer: ClientObserver,
        wait_observer: WaitObserver,
        domain: str = DEFAULT_DOMAIN,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout_seconds: float = 60.0,
    ) -> None:
        self._username = username
        self._api_key = api_key
        self._domain = domain
        self._observer = observer
        self._wait_observer = wait_observer
        self._http = httpx.AsyncClient(
            transport=transport,
            timeout=httpx.Timeout(timeout_seconds, connect=10.0),
        )

    @classmethod
    def from_config(
        cls,
        config: BigMLConfig,
        observer: ClientObserver,
        wait_observer: WaitObserver,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> Self:
        return cls(
            username=config.username,
            api_key=config.api_key,
            domain=config.domain,
            observer=observer,
            wait_observer=wait_observer,
            transport=transport,
        )

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ------------------------------------------------------------------
    # Resource operations
    # ------------------------------------------------------------------

    async def create(self, args: ExecutionArgs) -> Execution:
        """Create a new execution. BigML returns it immediately, still running."""
        response = await self._request("POST", args.create_path, json=args.to_request_body())
        return self._parse(response, args.resource_class)

    async def create_and_wait(self, args: ExecutionArgs) -> Resource:
        execution = await self.create(args)
        return await self.wait(execution.id)

    async def fetch(self, resource_id: str) -> Resource:
        """Fetch the current state of an existing resource."""
        model = resource_class_for(resource_id)
        response = await self._request("GET", resource_id)
        return self._parse(response, model)

    async def wait(
        self,
        resource_id: str,
        policy: WaitPolicy = DEFAULT_POLL_POLICY,
        progress: ProgressCallback[Resource] | None = None,
    ) -> Resource:
        """Poll an existing resource, returning it once it's ready.

        Raises:
            CouldNotAccessUrlError: wrapping the error that ended the wait; use
                ``original_error`` to get at a WaitFailedError.
        """
        url = self._url(resource_id)
        try:
            return await wait_for_resource(
                fetch=self.fetch,
                resource_id=resource_id,
                observer=self._wait_observer,
                policy=policy,
                progress=progress,
            )
        except BigMLError as exc:
            raise CouldNotAccessUrlError(url=url, source=exc) from exc

    async def update(self, resource_id: str, body: dict[str, Any]) -> None:
        """Update a resource.

        BigML's PUT response is often not a complete resource, so it is checked
        for valid JSON and then discarded. Use ``fetch`` for the new state.
        """
        response = await self._request("PUT", resource_id, json=body)
        self._json(response)

    async def delete(self, resource_id: str) -> None:
        await self._request("DELETE", resource_id)

    async def download(
        self, resource_id: str, policy: WaitPolicy = DEFAULT_DOWNLOAD_POLICY
    ) -> bytes:
        """Download a resource as CSV, waiting until BigML has it ready.

        Only some resource types (datasets, batch predictions, ...) support this.
        """
        path = f"{resource_id}/download"
        url = self._url(path)
        redacted = url_without_api_key(url)

        async def probe() -> WaitStatus[bytes]:
            try:
                response = await self._request("GET", path)
            except BigMLError as exc:
                return FailedTemporarily(exc)
            # JSON instead of CSV means BigML is still preparing the file.
            if response.headers.get("content-type", "").startswith("application/json"):
                self._observer.download_not_ready(url=redacted)
                return Waiting()
            return Finished(response.content)

        try:
            return await wait(
                policy=policy, probe=probe, observer=self._wait_observer, label=path
            )
        except BigMLError as exc:
            raise CouldNotAccessUrlError(url=url, source=exc) from exc

    # ------------------------------------------------------------------
    # HTTP plumbing
    # ------------------------------------------------------------------

    def _url(self, path: str) -> str:
        query = urlencode({"username": self._username, "api_key": self._api_key})
        return f"https://{self._domain}/{path.lstrip('/')}?{query}"

    async def _request(
        self, method: str, path: str, json: dict[str, Any] | None = None
    ) -> httpx.Response:
        """Send one request and return the response if it was a 2xx.

        Raises:
            CouldNotAccessUrlError: if the request could not be sent at all.
            PaymentRequiredError: on HTTP 402.
            UnexpectedHttpStatusError: on any other non-2xx status.
        """
        url = self._url(path)
        redacted = url_without_api_key(url)
        self._observer.request_sent(method=method, url=redacted)
        try:
            response = await self._http.request(method, url, json=json)
        except httpx.HTTPError as exc:
            error = CouldNotAccessUrlError(url=url, source=exc)
            self._observer.request_failed(method=method, url=redacted, reason=str(error))
            raise error from exc

        if not response.is_success:
            error = response_to_error(response)
            self._observer.request_failed(method=method, url=redacted, reason=str(error))
            raise error

        self._observer.request_succeeded(
            method=method, url=redacted, status_code=response.status_code
        )
        return response

    def _json(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise InvalidResponseError(reason=str(exc)) from exc

    def _parse[R: Resource](self, response: httpx.Response, model: type[R]) -> R:
        try:
            return model.model_validate(self._json(response))
        except ValidationError as exc:
            raise InvalidResponseError(reason=str(exc)) from exc
