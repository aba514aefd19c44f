"""Shared pytest fixtures for pagechain tests."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from pagechain.core.pagination.context import EventLoopGroup


@pytest.fixture
def anyio_backend() -> str:
    """Run anyio-marked tests on asyncio; execution contexts wrap asyncio loops."""
    return "asyncio"


@pytest.fixture
def loop_group() -> Iterator[EventLoopGroup]:
    """Two background event loops, shut down after the test."""
    group = EventLoopGroup(size=2, name="test-loop")
    yield group
    group.shutdown()
