"""Single-use pagination sessions."""

from __future__ import annotations

import concurrent.futures
import logging
import uuid
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

from pagechain.core.config.models import PaginationConfig
from pagechain.core.pagination.context import EventLoopGroup, ExecutionContext, resolve_context
from pagechain.core.pagination.driver import (
    PageDecision,
    PageExecutor,
    PageState,
    PaginationDriver,
    resolve,
)
from pagechain.core.pagination.errors import SessionStateError
from pagechain.core.pagination.sequence import PageSequence
from pagechain.core.pagination.tokens import TokenAccessors

logger = logging.getLogger(__name__)

RequestT = TypeVar("RequestT")
ResponseT = TypeVar("ResponseT")
TokenT = TypeVar("TokenT")
T = TypeVar("T")

ReduceHandler = Callable[
    [T, ResponseT, ExecutionContext], tuple[bool, T] | Awaitable[tuple[bool, T]]
]


class PaginationSession(Generic[RequestT, ResponseT, TokenT]):
    """One end-to-end pagination run, bound to one execution context.

    A session is consumed exactly once, through run(), reduce(), start(),
    start_reduce() or pages(). It cannot be restarted; build a new session
    from a fresh initial request instead.

    Args:
        request: Initial request (token absent)
        executor: Page executor performing one exchange
        tokens: Token accessors for this request/response pair
        context: Explicit execution context
        group: Event loop pool to take a context from when context is None
        config: Pagination limits and guards

    Example:
        >>> session = PaginationSession(ListInput(page_size=5), list_items, tokens)
        >>> pages = await session.pages().collect()
    """

    def __init__(
        self,
        request: RequestT,
        executor: PageExecutor[RequestT, ResponseT],
        tokens: TokenAccessors[RequestT, ResponseT, TokenT],
        *,
        context: ExecutionContext | None = None,
        group: EventLoopGroup | None = None,
        config: PaginationConfig | None = None,
    ) -> None:
        self.session_id = uuid.uuid4().hex[:12]
        self.context = resolve_context(context, group)
        self._driver: PaginationDriver[RequestT, ResponseT, TokenT] = PaginationDriver(
            request,
            executor,
            tokens,
            context=self.context,
            config=config,
            session_id=self.session_id,
        )
        self._started = False
        self._future: concurrent.futures.Future | None = None
        logger.debug(
            "Created pagination session",
            extra={"session_id": self.session_id, "context": self.context.name},
        )

    @property
    def state(self) -> PageState:
        return self._driver.state

    @property
    def pages_fetched(self) -> int:
        return self._driver.pages

    @property
    def driver(self) -> PaginationDriver[RequestT, ResponseT, TokenT]:
        return self._driver

    async def run(self, on_page: PageDecision[ResponseT]) -> None:
        """Feed every page to on_page until the session terminates.

        Args:
            on_page: (response, context) -> bool, or an awaitable of one; False stops

        Raises:
            Exception: The first failure, unmodified
        """
        self._claim()
        await self.context.run(self._driver.drive(on_page))

    async def reduce(self, initial: T, on_page: ReduceHandler[T, ResponseT]) -> T:
        """Fold every page into an accumulator.

        Args:
            initial: Accumulator value passed to the first handler call
            on_page: (accumulator, response, context) -> (keep_going, accumulator)

        Returns:
            The accumulator returned by the last handler call

        Raises:
            Exception: The first failure, unmodified; no partial accumulator is returned
        """
        self._claim()
        return await self.context.run(self._reduce(initial, on_page))

    def start(self, on_page: PageDecision[ResponseT]) -> concurrent.futures.Future[None]:
        """Schedule run() on the bound loop and return its completion signal.

        Safe to call from any thread, including threads without an event loop.
        """
        self._claim()
        self._future = self.context.submit(self._driver.drive(on_page))
        return self._future

    def start_reduce(
        self, initial: T, on_page: ReduceHandler[T, ResponseT]
    ) -> concurrent.futures.Future[T]:
        """Schedule reduce() on the bound loop and return its completion signal."""
        self._claim()
        self._future = self.context.submit(self._reduce(initial, on_page))
        return self._future

    def pages(self) -> PageSequence[ResponseT]:
        """Consume the session as a pull-style sequence of responses."""
        self._claim()
        return PageSequence(self._driver)

    def cancel(self) -> bool:
        """Stop the session; no further page request is issued.

        Safe to call from any thread. The driver is marked cancelled before
        this returns; for a session launched with start() or start_reduce()
        its task is cancelled as well, which aborts a request in flight.
        Otherwise a request already in flight is left to finish, its result
        is discarded and the session resolves as cancelled.

        Returns:
            True if the session was still active
        """
        cancelled = self._driver.cancel()
        if self._future is not None:
            cancelled = self._future.cancel() or cancelled
        return cancelled

    async def _reduce(self, initial: T, on_page: ReduceHandler[T, ResponseT]) -> T:
        accumulator = initial

        async def handle(response: ResponseT, context: ExecutionContext) -> bool:
            nonlocal accumulator
            keep_going, accumulator = await resolve(on_page(accumulator, response, context))
            return keep_going

        await self._driver.drive(handle)
        return accumulator

    def _claim(self) -> None:
        if self._started:
            raise SessionStateError(
                f"Pagination session {self.session_id} has already been started"
            )
        self._started = True
