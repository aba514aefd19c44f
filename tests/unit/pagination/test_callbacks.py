"""Tests for the push-style and fold-style front ends."""

from __future__ import annotations

import math

import pytest

from pagechain.core.pagination.callbacks import paginate, paginate_reduce
from pagechain.core.pagination.context import ExecutionContext
from tests.fixtures.listing import (
    COUNTER_TOKENS,
    STRING_TOKENS,
    WORDS,
    CounterInput,
    CounterOutput,
    StringListInput,
    StringListOutput,
    counter_service,
    string_list_service,
)


@pytest.mark.anyio
async def test_paginate_integer_tokens() -> None:
    """Test 23 items with page size 4: six requests, items collected in order."""
    service = counter_service(23)
    collected: list[int] = []

    async def on_page(response: CounterOutput, context: ExecutionContext) -> bool:
        collected.extend(response.array)
        return True

    await paginate(CounterInput(page_size=4), service, COUNTER_TOKENS, on_page)

    assert len(service.requests) == 6
    assert [len(service.serve(r).array) for r in service.requests] == [4, 4, 4, 4, 4, 3]
    assert collected == list(range(23))


@pytest.mark.anyio
async def test_paginate_string_tokens() -> None:
    """Test string tokens: ceil(N/5) requests, no duplicates or omissions."""
    service = string_list_service()
    collected: list[str] = []

    def on_page(response: StringListOutput, context: ExecutionContext) -> bool:
        collected.extend(response.array)
        return True

    await paginate(StringListInput(page_size=5), service, STRING_TOKENS, on_page)

    assert len(service.requests) == math.ceil(len(WORDS) / 5)
    assert collected == WORDS


@pytest.mark.anyio
async def test_paginate_handler_receives_bound_context() -> None:
    """Test that executor and handler both receive the session's context."""
    service = counter_service(9)
    ctx = ExecutionContext.current()
    seen: list[ExecutionContext] = []

    async def on_page(response: CounterOutput, context: ExecutionContext) -> bool:
        seen.append(context)
        return True

    await paginate(CounterInput(page_size=4), service, COUNTER_TOKENS, on_page, context=ctx)

    assert seen == [ctx, ctx, ctx]
    assert service.contexts == [ctx, ctx, ctx]


@pytest.mark.anyio
async def test_paginate_error_on_first_request() -> None:
    """Test that a failing first request means zero handler calls."""
    boom = ConnectionError("unreachable")
    service = counter_service(23, fail_on={0: boom})
    calls = {"n": 0}

    def on_page(response: CounterOutput, context: ExecutionContext) -> bool:
        calls["n"] += 1
        return True

    with pytest.raises(ConnectionError) as ei:
        await paginate(CounterInput(page_size=4), service, COUNTER_TOKENS, on_page)

    assert ei.value is boom
    assert calls["n"] == 0


@pytest.mark.anyio
async def test_reduce_collects_string_list() -> None:
    """Test that the final accumulator is the concatenation of every page."""
    service = string_list_service()

    async def on_page(
        current: list[str], response: StringListOutput, context: ExecutionContext
    ) -> tuple[bool, list[str]]:
        return True, current + response.array

    result = await paginate_reduce(
        StringListInput(page_size=5), [], service, STRING_TOKENS, on_page
    )

    assert result == WORDS


@pytest.mark.anyio
async def test_reduce_is_strict_left_fold() -> None:
    """Test that each handler call receives exactly what the previous one returned."""
    service = counter_service(23)
    received: list[int] = []

    def on_page(
        total: int, response: CounterOutput, context: ExecutionContext
    ) -> tuple[bool, int]:
        received.append(total)
        return True, total * 2 + sum(response.array)

    result = await paginate_reduce(
        CounterInput(page_size=4), 1, service, COUNTER_TOKENS, on_page
    )

    expected = 1
    folded = []
    for request in service.requests:
        folded.append(expected)
        expected = expected * 2 + sum(service.serve(request).array)
    assert received == folded
    assert result == expected


@pytest.mark.anyio
async def test_reduce_stop_returns_accumulator_so_far() -> None:
    """Test that a stop decision resolves with the accumulator returned alongside it."""
    service = counter_service(100)

    async def on_page(
        items: list[int], response: CounterOutput, context: ExecutionContext
    ) -> tuple[bool, list[int]]:
        items = items + response.array
        return len(items) < 8, items

    result = await paginate_reduce(
        CounterInput(page_size=4), [], service, COUNTER_TOKENS, on_page
    )

    assert result == list(range(8))
    assert len(service.requests) == 2


@pytest.mark.anyio
async def test_reduce_failure_surfaces_no_partial_result() -> None:
    """Test that a failure after some pages raises instead of returning the accumulator."""
    boom = RuntimeError("page 3 failed")
    service = counter_service(100, fail_on={2: boom})
    checkpoints: list[list[int]] = []

    async def on_page(
        items: list[int], response: CounterOutput, context: ExecutionContext
    ) -> tuple[bool, list[int]]:
        items = items + response.array
        checkpoints.append(items)
        return True, items

    with pytest.raises(RuntimeError) as ei:
        await paginate_reduce(CounterInput(page_size=4), [], service, COUNTER_TOKENS, on_page)

    assert ei.value is boom
    assert checkpoints[-1] == list(range(8))
