"""Pagination sessions driven through HttpPageExecutor against a mock listing service."""

from __future__ import annotations

import asyncio
import json
import math

import httpx
import pytest

from pagechain.core.api.http.config import HttpClientConfig
from pagechain.core.api.http.errors import ServiceError
from pagechain.core.api.http.executor import HttpPageExecutor
from pagechain.core.pagination.callbacks import iterate_pages, paginate, paginate_reduce
from pagechain.core.pagination.context import EventLoopGroup, ExecutionContext
from pagechain.core.pagination.session import PaginationSession
from tests.fixtures.listing import (
    COUNTER_TOKENS,
    STRING_TOKENS,
    WORDS,
    CounterInput,
    CounterOutput,
    StringListInput,
    StringListOutput,
    counter_page,
    string_list_page,
)

CFG = HttpClientConfig(base_url="https://listing.test")


def _bad_request() -> httpx.Response:
    return httpx.Response(400, json={"__type": "BadRequest", "message": "bad request"})


class ListingServer:
    """Mock listing service; decodes each request body and records it."""

    def __init__(self, serve, *, fail_from: int | None = None) -> None:
        self.serve = serve
        self.fail_from = fail_from
        self.bodies: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.bodies.append(body)
        if self.fail_from is not None and len(self.bodies) > self.fail_from:
            return _bad_request()
        return httpx.Response(200, json=self.serve(body).model_dump(mode="json"))


def counter_server(size: int, **kwargs) -> ListingServer:
    return ListingServer(lambda body: counter_page(CounterInput(**body), size), **kwargs)


def string_server(**kwargs) -> ListingServer:
    return ListingServer(lambda body: string_list_page(StringListInput(**body)), **kwargs)


@pytest.mark.anyio
async def test_integer_token_paginate() -> None:
    """Test 23 items over page size 4: six requests of sizes 4,4,4,4,4,3."""
    server = counter_server(23)
    collected: list[int] = []
    sizes: list[int] = []

    async def on_page(response: CounterOutput, context: ExecutionContext) -> bool:
        collected.extend(response.array)
        sizes.append(len(response.array))
        return True

    async with HttpPageExecutor(
        CFG, CounterOutput, transport=httpx.MockTransport(server)
    ) as executor:
        await paginate(CounterInput(page_size=4), executor, COUNTER_TOKENS, on_page)

    assert sizes == [4, 4, 4, 4, 4, 3]
    assert collected == list(range(23))
    assert [b.get("input_token") for b in server.bodies] == [None, 4, 8, 12, 16, 20]


@pytest.mark.anyio
async def test_string_token_paginate() -> None:
    """Test unique string tokens: ceil(N/5) requests, original order preserved."""
    server = string_server()
    collected: list[str] = []

    def on_page(response: StringListOutput, context: ExecutionContext) -> bool:
        collected.extend(response.array)
        return True

    async with HttpPageExecutor(
        CFG, StringListOutput, transport=httpx.MockTransport(server)
    ) as executor:
        await paginate(StringListInput(page_size=5), executor, STRING_TOKENS, on_page)

    assert len(server.bodies) == math.ceil(len(WORDS) / 5)
    assert collected == WORDS


@pytest.mark.anyio
async def test_string_token_reduce_paginate() -> None:
    server = string_server()

    async with HttpPageExecutor(
        CFG, StringListOutput, transport=httpx.MockTransport(server)
    ) as executor:
        result = await paginate_reduce(
            StringListInput(page_size=5),
            [],
            executor,
            STRING_TOKENS,
            lambda current, response, context: (True, current + response.array),
        )

    assert result == WORDS


@pytest.mark.anyio
async def test_paginate_error() -> None:
    """Test a service error on the first request: no handler call, error code kept."""
    server = string_server(fail_from=0)
    calls = {"n": 0}

    def on_page(response: StringListOutput, context: ExecutionContext) -> bool:
        calls["n"] += 1
        return True

    async with HttpPageExecutor(
        CFG, StringListOutput, transport=httpx.MockTransport(server)
    ) as executor:
        with pytest.raises(ServiceError) as ei:
            await paginate(StringListInput(page_size=5), executor, STRING_TOKENS, on_page)

    assert ei.value.error_code == "BadRequest"
    assert calls["n"] == 0
    assert len(server.bodies) == 1


@pytest.mark.anyio
async def test_paginate_error_after_first_request() -> None:
    """Test success on page 1 then an error on page 2: one handler call, then failure."""
    server = string_server(fail_from=1)
    calls = {"n": 0}

    def on_page(response: StringListOutput, context: ExecutionContext) -> bool:
        calls["n"] += 1
        return True

    async with HttpPageExecutor(
        CFG, StringListOutput, transport=httpx.MockTransport(server)
    ) as executor:
        with pytest.raises(ServiceError) as ei:
            await paginate(StringListInput(page_size=5), executor, STRING_TOKENS, on_page)

    assert ei.value.error_code == "BadRequest"
    assert calls["n"] == 1
    assert len(server.bodies) == 2


@pytest.mark.anyio
async def test_async_sequence_reduce() -> None:
    """Test the pull-style sequence over HTTP."""
    server = counter_server(23)

    async with HttpPageExecutor(
        CFG, CounterOutput, transport=httpx.MockTransport(server)
    ) as executor:
        result = await iterate_pages(
            CounterInput(page_size=4), executor, COUNTER_TOKENS
        ).reduce([], lambda acc, page: acc + page.array)

    assert result == list(range(23))


@pytest.mark.anyio
async def test_async_sequence_error() -> None:
    server = string_server(fail_from=0)

    async with HttpPageExecutor(
        CFG, StringListOutput, transport=httpx.MockTransport(server)
    ) as executor:
        pages = iterate_pages(StringListInput(page_size=5), executor, STRING_TOKENS)
        with pytest.raises(ServiceError) as ei:
            await pages.reduce([], lambda acc, page: acc + page.array)

    assert ei.value.error_code == "BadRequest"


def test_paginate_on_event_loop() -> None:
    """Test that a session bound to a pool loop runs its handler on that loop."""
    server = string_server()

    with EventLoopGroup(size=3) as group:
        ctx = group.next()
        executor = HttpPageExecutor(CFG, StringListOutput, transport=httpx.MockTransport(server))

        def on_page(response: StringListOutput, context: ExecutionContext) -> bool:
            assert asyncio.get_running_loop() is ctx.loop
            assert context is ctx
            return True

        session = PaginationSession(
            StringListInput(page_size=5), executor, STRING_TOKENS, context=ctx
        )
        session.start(on_page).result(timeout=5)
        ctx.submit(executor.aclose()).result(timeout=5)

    assert len(server.bodies) == math.ceil(len(WORDS) / 5)
