"""Pull-style consumption of a pagination session."""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable, Iterable
from typing import Any, Generic, TypeVar

from pagechain.core.pagination.driver import PaginationDriver, resolve

ResponseT = TypeVar("ResponseT")
T = TypeVar("T")


class PageSequence(Generic[ResponseT]):
    """Single-pass async sequence of responses.

    Each step of iteration runs exactly one request on the session's bound
    loop. A failure is raised by the step that hit it; afterwards the
    sequence is exhausted. It cannot be rewound.

    Args:
        driver: Driver of the session being consumed

    Example:
        >>> async for page in session.pages():
        ...     handle(page.items)
    """

    def __init__(self, driver: PaginationDriver[Any, ResponseT, Any]) -> None:
        self._driver = driver

    def __aiter__(self) -> PageSequence[ResponseT]:
        return self

    async def __anext__(self) -> ResponseT:
        response = await self._driver.context.run(self._driver.pull())
        if response is None:
            raise StopAsyncIteration
        return response

    async def reduce(
        self, initial: T, fn: Callable[[T, ResponseT], T | Awaitable[T]]
    ) -> T:
        """Fold the remaining pages into an accumulator, in page order.

        The pulls and every fn call run on the session's bound loop, like
        the handlers of the push-style front ends.

        Args:
            initial: Starting accumulator value
            fn: (accumulator, response) -> accumulator, or an awaitable of one

        Returns:
            Final accumulator
        """
        return await self._driver.context.run(self._fold(initial, fn))

    async def _fold(self, initial: T, fn: Callable[[T, ResponseT], T | Awaitable[T]]) -> T:
        accumulator = initial
        async for response in self:
            accumulator = await resolve(fn(accumulator, response))
        return accumulator

    async def collect(self) -> list[ResponseT]:
        """Pull every remaining page into a list."""
        return await self.reduce([], lambda pages, page: [*pages, page])

    async def items(self, get_items: Callable[[ResponseT], Iterable[T]]) -> AsyncIterator[T]:
        """Iterate over the items of every remaining page.

        Args:
            get_items: Returns the data payload of a response
        """
        async for response in self:
            for item in get_items(response):
                yield item

    async def aclose(self) -> None:
        """Stop pulling; no further request is issued."""
        self._driver.cancel()

    async def __aenter__(self) -> PageSequence[ResponseT]:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
