"""Sequential token-chaining pagination state machine.

One driver serves every front end: the push-style callbacks run drive(),
the pull-style PageSequence calls pull() once per element. Both share the
same termination rules and failure handling.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import threading
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from enum import Enum
from typing import Generic, Protocol, TypeVar

from pagechain.core.config.models import PaginationConfig
from pagechain.core.pagination.context import ExecutionContext
from pagechain.core.pagination.errors import SessionStateError
from pagechain.core.pagination.tokens import TokenAccessors

logger = logging.getLogger(__name__)

RequestT = TypeVar("RequestT")
ResponseT = TypeVar("ResponseT")
TokenT = TypeVar("TokenT")
T = TypeVar("T")

RequestT_contra = TypeVar("RequestT_contra", contravariant=True)
ResponseT_co = TypeVar("ResponseT_co", covariant=True)


class PageExecutor(Protocol[RequestT_contra, ResponseT_co]):
    """Performs one request/response exchange on the given context, or raises."""

    def __call__(
        self, request: RequestT_contra, context: ExecutionContext
    ) -> Awaitable[ResponseT_co]: ...


PageDecision = Callable[[ResponseT, ExecutionContext], bool | Awaitable[bool]]


class PageState(str, Enum):
    """Lifecycle state of a pagination session."""

    IDLE = "idle"
    REQUESTING = "requesting"
    AWAITING_HANDLER = "awaiting_handler"
    COMPLETED = "completed"
    STOPPED = "stopped"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATES


_TERMINAL_STATES = frozenset(
    {PageState.COMPLETED, PageState.STOPPED, PageState.FAILED, PageState.CANCELLED}
)


async def resolve(value: T | Awaitable[T]) -> T:
    """Await value if it is awaitable, otherwise return it as is."""
    if inspect.isawaitable(value):
        return await value
    return value


class PaginationDriver(Generic[RequestT, ResponseT, TokenT]):
    """Issues page requests one at a time and decides when to stop.

    Args:
        request: Initial request (token absent)
        executor: Page executor performing one exchange
        tokens: Token accessors for this request/response pair
        context: Execution context passed to the executor and handlers
        config: Pagination limits and guards
        session_id: Identifier used in logs
    """

    def __init__(
        self,
        request: RequestT,
        executor: PageExecutor[RequestT, ResponseT],
        tokens: TokenAccessors[RequestT, ResponseT, TokenT],
        *,
        context: ExecutionContext,
        config: PaginationConfig | None = None,
        session_id: str = "-",
    ) -> None:
        self._request = request
        self._executor = executor
        self._tokens = tokens
        self._context = context
        self._config = config or PaginationConfig()
        self._session_id = session_id
        self._state = PageState.IDLE
        self._pages = 0
        self._in_flight = False
        self._cancelled = threading.Event()
        self.error: BaseException | None = None

    @property
    def state(self) -> PageState:
        return self._state

    @property
    def request(self) -> RequestT:
        """Request the next page will be fetched with."""
        return self._request

    @property
    def pages(self) -> int:
        """Number of responses received so far."""
        return self._pages

    @property
    def context(self) -> ExecutionContext:
        return self._context

    @property
    def done(self) -> bool:
        return self._state.is_terminal

    def cancel(self) -> bool:
        """Terminate the session; no further request is issued.

        Safe to call from any thread. The cancel flag is set before this
        returns, so a loop that has not reached its next request yet never
        issues it. A request already in flight is left to finish and its
        result is discarded by the bound loop.

        Returns:
            True if the session was still active
        """
        if self._state.is_terminal or self._cancelled.is_set():
            return False
        self._cancelled.set()
        if not self._in_flight:
            self._finish(PageState.CANCELLED, reason="cancelled")
        return True

    async def drive(self, on_page: PageDecision[ResponseT]) -> None:
        """Run the loop until a terminal state is reached.

        Args:
            on_page: Handler returning True to continue, False to stop

        Raises:
            Exception: The first failure from the executor, handler or token accessors
            asyncio.CancelledError: If the session is cancelled
        """
        if self._cancelled.is_set():
            raise asyncio.CancelledError()
        if self._state.is_terminal:
            raise SessionStateError(f"Pagination session already {self._state.value}")
        with self._single_flight():
            while not self._state.is_terminal:
                response = await self._fetch()
                self._transition(PageState.AWAITING_HANDLER)
                keep_going = await resolve(on_page(response, self._context))
                self._check_not_cancelled()
                if not isinstance(keep_going, bool):
                    raise TypeError(
                        f"Page handler must return a bool, got {type(keep_going).__name__}"
                    )
                token = self._tokens.extract(response)
                self._advance(response, token, keep_going)

    async def pull(self) -> ResponseT | None:
        """Run exactly one iteration of the loop for a pull consumer.

        Returns:
            The next response, or None once the session has terminated

        Raises:
            Exception: The failure hit by this iteration (the session is then terminal)
        """
        if self._state.is_terminal or self._cancelled.is_set():
            return None
        with self._single_flight():
            response = await self._fetch()
            token = self._tokens.extract(response)
            self._transition(PageState.AWAITING_HANDLER)
            self._advance(response, token, keep_going=True)
            return response

    async def _fetch(self) -> ResponseT:
        self._check_not_cancelled()
        self._transition(PageState.REQUESTING)
        logger.debug(
            "Requesting page",
            extra={
                "session_id": self._session_id,
                "page": self._pages,
                "context": self._context.name,
            },
        )
        response = await self._executor(self._request, self._context)
        self._check_not_cancelled()
        self._pages += 1
        return response

    def _advance(self, response: ResponseT, token: TokenT | None, keep_going: bool) -> None:
        """Terminate, or derive the next request from this response's token."""
        if not keep_going:
            self._finish(PageState.STOPPED, reason="handler requested stop")
            return
        if token is None:
            self._finish(PageState.COMPLETED, reason="no continuation token")
            return
        if self._tokens.has_more is not None and not self._tokens.has_more(response):
            self._finish(PageState.COMPLETED, reason="no more results")
            return
        if (
            self._config.stop_on_repeated_token
            and self._tokens.current is not None
            and token == self._tokens.current(self._request)
        ):
            self._finish(PageState.COMPLETED, reason="repeated token")
            return
        if self._config.max_pages is not None and self._pages >= self._config.max_pages:
            self._finish(PageState.STOPPED, reason="max_pages reached")
            return
        self._request = self._tokens.inject(self._request, token)

    def _transition(self, state: PageState) -> None:
        if self._state.is_terminal:
            raise SessionStateError(f"Pagination session already {self._state.value}")
        self._state = state

    def _finish(self, state: PageState, *, reason: str | None = None) -> None:
        self._state = state
        logger.debug(
            "Pagination finished",
            extra={
                "session_id": self._session_id,
                "state": state.value,
                "pages": self._pages,
                "reason": reason,
            },
        )

    def _check_not_cancelled(self) -> None:
        # cancel() may land from any thread while a request or handler is pending
        if self._cancelled.is_set():
            raise asyncio.CancelledError()

    @contextmanager
    def _single_flight(self) -> Iterator[None]:
        if self._in_flight:
            raise SessionStateError("A page request is already in flight for this session")
        self._in_flight = True
        try:
            yield
        except asyncio.CancelledError:
            if not self._state.is_terminal:
                self._finish(PageState.CANCELLED, reason="cancelled")
            raise
        except Exception as exc:
            if not self._state.is_terminal:
                self.error = exc
                self._finish(PageState.FAILED, reason=type(exc).__name__)
            raise
        finally:
            self._in_flight = False

