"""HTTP page executor built on HTTPX.

Sends one pydantic request model per call and decodes the reply into a
pydantic response model. Failures are raised as TransportError,
RequestTimeoutError, ServiceError or DecodeError; nothing is retried.
"""

from __future__ import annotations

import asyncio
import json
import time
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Generic, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from pagechain.core.api.http.config import HttpClientConfig
from pagechain.core.api.http.errors import (
    ApiError,
    DecodeError,
    RequestTimeoutError,
    ServiceError,
    TransportError,
)
from pagechain.core.api.http.logging_utils import PageRequestLogContext, log_request, log_response
from pagechain.core.api.http.utils import get_request_id, join_url, parse_error_code, safe_snippet

if TYPE_CHECKING:
    from pagechain.core.pagination.context import ExecutionContext

RequestT = TypeVar("RequestT", bound=BaseModel)
ResponseT = TypeVar("ResponseT", bound=BaseModel)


def _default_request_id() -> str:
    """Generate simple timestamp-based request ID."""
    return f"req_{int(time.time() * 1000)}"


def _query_value(value: Any) -> Any:
    if isinstance(value, dict | list):
        return json.dumps(value, separators=(",", ":"))
    return value


def _query_params(body: Mapping[str, Any]) -> dict[str, Any]:
    """Map a JSON-mode model dump to query parameters.

    Scalars are left for HTTPX to encode (bools become true/false), a list
    becomes one repeated key per element and nested objects are sent as
    compact JSON.
    """
    params: dict[str, Any] = {}
    for key, value in body.items():
        if isinstance(value, list):
            params[key] = [_query_value(item) for item in value]
        else:
            params[key] = _query_value(value)
    return params


class HttpPageExecutor(Generic[RequestT, ResponseT]):
    """Page executor sending JSON-encoded request models over HTTP.

    Args:
        config: Client configuration
        response_model: Pydantic model every successful body is decoded into
        path: Request path of the list operation
        method: HTTP method; GET sends request fields as query parameters,
            other methods send them as a JSON body
        auth: Optional HTTPX authentication handler
        transport: Optional custom transport (useful for testing)

    The underlying HTTPX client belongs to the event loop of the first call.
    Use one executor per execution context; calling it from a session bound
    to another loop raises RuntimeError.

    Example:
        >>> config = HttpClientConfig(base_url="https://api.example.com")
        >>> async with HttpPageExecutor(config, ListItemsOutput, path="/items") as executor:
        ...     await paginate(ListItemsInput(page_size=10), executor, tokens, on_page)
    """

    def __init__(
        self,
        config: HttpClientConfig,
        response_model: type[ResponseT],
        *,
        path: str = "/",
        method: str = "POST",
        auth: httpx.Auth | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.response_model = response_model
        self.path = path
        self.method = method.upper()
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            headers={"User-Agent": config.user_agent, **config.headers},
            timeout=config.timeout,
            follow_redirects=config.follow_redirects,
            verify=config.verify,
            auth=auth,
            transport=transport,
        )
        self._loop: asyncio.AbstractEventLoop | None = None

    async def aclose(self) -> None:
        """Close the underlying HTTP client and release resources."""
        await self._client.aclose()

    async def __aenter__(self) -> HttpPageExecutor[RequestT, ResponseT]:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def __call__(self, request: RequestT, context: ExecutionContext) -> ResponseT:
        """Send one page request and decode the response.

        Args:
            request: Request model for this page
            context: Execution context the session is bound to

        Returns:
            Decoded response model

        Raises:
            TransportError: No response was received
            RequestTimeoutError: The request timed out
            ServiceError: The service answered with a 4xx/5xx status
            DecodeError: The body does not match response_model
            RuntimeError: The executor is already in use on another event loop
        """
        if self._loop is None:
            self._loop = context.loop
        elif context.loop is not self._loop:
            raise RuntimeError(
                f"HttpPageExecutor called from {context.name!r} is bound to another event loop; "
                "create one executor per execution context"
            )
        url = join_url(str(self._client.base_url), self.path)
        req_id = _default_request_id()
        headers = {"X-Request-Id": req_id}
        body = request.model_dump(mode="json", by_alias=True, exclude_none=True)

        ctx = PageRequestLogContext(
            method=self.method, url=url, request_id=req_id, context=context.name
        )
        start = log_request(ctx, {**self._client.headers, **headers}, self.config.redact_headers)

        try:
            if self.method == "GET":
                resp = await self._client.request(
                    self.method, url, params=_query_params(body), headers=headers
                )
            else:
                resp = await self._client.request(self.method, url, json=body, headers=headers)
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(
                message="Request timed out", method=self.method, url=url, request_id=req_id, cause=e
            ) from e
        except httpx.TransportError as e:
            raise TransportError(
                message="Network error", method=self.method, url=url, request_id=req_id, cause=e
            ) from e

        log_response(ctx, resp.status_code, time.perf_counter() - start)

        if resp.status_code >= 400:
            raise self._build_error(
                ServiceError,
                message="Service returned an error",
                url=url,
                response=resp,
                request_id=req_id,
            )

        try:
            return self.response_model.model_validate_json(resp.content)
        except ValidationError as e:
            raise self._build_error(
                DecodeError,
                message=f"Failed to decode {self.response_model.__name__}",
                url=url,
                response=resp,
                request_id=req_id,
                cause=e,
            ) from e

    def _build_error(
        self,
        exc_type: type[ApiError],
        *,
        message: str,
        url: str,
        response: httpx.Response,
        request_id: str,
        cause: BaseException | None = None,
    ) -> ApiError:
        content = response.content or b""
        return exc_type(
            message=message,
            method=self.method,
            url=url,
            status_code=response.status_code,
            error_code=parse_error_code(content),
            request_id=get_request_id(response.headers) or request_id,
            response_body_snippet=safe_snippet(content, self.config.max_response_body_for_error),
            cause=cause,
        )
