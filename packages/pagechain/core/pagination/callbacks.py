"""Callback-driven front ends: push each page to a handler, or fold pages."""

from __future__ import annotations

from typing import TypeVar

from pagechain.core.config.models import PaginationConfig
from pagechain.core.pagination.context import EventLoopGroup, ExecutionContext
from pagechain.core.pagination.driver import PageDecision, PageExecutor
from pagechain.core.pagination.sequence import PageSequence
from pagechain.core.pagination.session import PaginationSession, ReduceHandler
from pagechain.core.pagination.tokens import TokenAccessors

RequestT = TypeVar("RequestT")
ResponseT = TypeVar("ResponseT")
TokenT = TypeVar("TokenT")
T = TypeVar("T")


async def paginate(
    request: RequestT,
    executor: PageExecutor[RequestT, ResponseT],
    tokens: TokenAccessors[RequestT, ResponseT, TokenT],
    on_page: PageDecision[ResponseT],
    *,
    context: ExecutionContext | None = None,
    group: EventLoopGroup | None = None,
    config: PaginationConfig | None = None,
) -> None:
    """Call on_page for every page until the collection or the handler ends it.

    Pages are handled strictly in order: the request for page k+1 is issued
    only after on_page has finished with page k.

    Args:
        request: Initial request (token absent)
        executor: Page executor performing one exchange
        tokens: Token accessors for this request/response pair
        on_page: (response, context) -> bool, or an awaitable of one; False stops
        context: Execution context to bind the session to
        group: Event loop pool to take a context from when context is None
        config: Pagination limits and guards

    Raises:
        Exception: The first failure from the executor, handler or token accessors

    Example:
        >>> collected = []
        >>> async def on_page(page, context):
        ...     collected.extend(page.items)
        ...     return True
        >>> await paginate(ListInput(page_size=4), list_items, tokens, on_page)
    """
    session = PaginationSession(
        request, executor, tokens, context=context, group=group, config=config
    )
    await session.run(on_page)


async def paginate_reduce(
    request: RequestT,
    initial: T,
    executor: PageExecutor[RequestT, ResponseT],
    tokens: TokenAccessors[RequestT, ResponseT, TokenT],
    on_page: ReduceHandler[T, ResponseT],
    *,
    context: ExecutionContext | None = None,
    group: EventLoopGroup | None = None,
    config: PaginationConfig | None = None,
) -> T:
    """Fold every page into an accumulator carried from handler call to handler call.

    Args:
        request: Initial request (token absent)
        initial: Accumulator passed to the first handler call
        executor: Page executor performing one exchange
        tokens: Token accessors for this request/response pair
        on_page: (accumulator, response, context) -> (keep_going, accumulator)
        context: Execution context to bind the session to
        group: Event loop pool to take a context from when context is None
        config: Pagination limits and guards

    Returns:
        The accumulator returned by the last handler call

    Raises:
        Exception: The first failure; the partial accumulator is discarded
    """
    session = PaginationSession(
        request, executor, tokens, context=context, group=group, config=config
    )
    return await session.reduce(initial, on_page)


def iterate_pages(
    request: RequestT,
    executor: PageExecutor[RequestT, ResponseT],
    tokens: TokenAccessors[RequestT, ResponseT, TokenT],
    *,
    context: ExecutionContext | None = None,
    group: EventLoopGroup | None = None,
    config: PaginationConfig | None = None,
) -> PageSequence[ResponseT]:
    """Build a session and return it as a pull-style page sequence.

    Example:
        >>> async for page in iterate_pages(ListInput(page_size=4), list_items, tokens):
        ...     print(page.items)
    """
    session = PaginationSession(
        request, executor, tokens, context=context, group=group, config=config
    )
    return session.pages()
