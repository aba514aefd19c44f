"""Execution contexts binding a pagination session to one event loop.

A session never reads the running loop implicitly once it exists: the loop is
chosen by resolve_context() at creation and carried in an ExecutionContext
that is handed to every executor and handler call.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import itertools
import logging
import threading
from collections.abc import Coroutine
from dataclasses import dataclass
from typing import Any, TypeVar

from pagechain.core.pagination.errors import SessionStateError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, eq=False)
class ExecutionContext:
    """One asyncio event loop a pagination session runs on.

    Args:
        loop: Event loop every executor call and handler invocation runs on
        name: Label used in logs
    """

    loop: asyncio.AbstractEventLoop
    name: str = "loop"

    @classmethod
    def current(cls) -> ExecutionContext:
        """Bind to the event loop running in the calling task."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as exc:
            raise SessionStateError(
                "No running event loop; pass context= or group= to bind the session"
            ) from exc
        return cls(loop=loop, name="running")

    def in_context(self) -> bool:
        """Check whether the caller is already running on the bound loop."""
        try:
            return asyncio.get_running_loop() is self.loop
        except RuntimeError:
            return False

    def submit(self, coro: Coroutine[Any, Any, T]) -> concurrent.futures.Future[T]:
        """Schedule a coroutine on the bound loop from any thread.

        Cancelling the returned future cancels the task on the bound loop.
        """
        return asyncio.run_coroutine_threadsafe(coro, self.loop)

    async def run(self, coro: Coroutine[Any, Any, T]) -> T:
        """Await a coroutine on the bound loop, whichever loop the caller is on."""
        if self.in_context():
            return await coro
        return await asyncio.wrap_future(self.submit(coro))


class EventLoopGroup:
    """Pool of event loops, each running forever on its own daemon thread.

    Args:
        size: Number of loops (and threads) in the pool
        name: Thread name prefix

    Example:
        >>> with EventLoopGroup(size=2) as group:
        ...     ctx = group.next()
    """

    def __init__(self, size: int = 1, *, name: str = "pagechain-loop") -> None:
        if size < 1:
            raise ValueError("EventLoopGroup size must be >= 1")
        self._contexts: list[ExecutionContext] = []
        self._threads: list[threading.Thread] = []
        self._lock = threading.Lock()
        self._closed = False

        for index in range(size):
            loop = asyncio.new_event_loop()
            started = threading.Event()
            thread = threading.Thread(
                target=self._run_loop,
                args=(loop, started),
                name=f"{name}-{index}",
                daemon=True,
            )
            thread.start()
            started.wait()
            self._contexts.append(ExecutionContext(loop=loop, name=thread.name))
            self._threads.append(thread)

        self._cycle = itertools.cycle(self._contexts)
        logger.debug("Started event loop group", extra={"size": size, "name": name})

    @staticmethod
    def _run_loop(loop: asyncio.AbstractEventLoop, started: threading.Event) -> None:
        asyncio.set_event_loop(loop)
        loop.call_soon(started.set)
        loop.run_forever()

    @property
    def contexts(self) -> tuple[ExecutionContext, ...]:
        """All contexts in the pool, in round-robin order."""
        return tuple(self._contexts)

    def next(self) -> ExecutionContext:
        """Hand out the next context, round-robin."""
        with self._lock:
            if self._closed:
                raise SessionStateError("EventLoopGroup has been shut down")
            return next(self._cycle)

    def shutdown(self, timeout: float | None = 5.0) -> None:
        """Cancel pending tasks, then stop every loop, join its thread and close it.

        Sessions still running on the group resolve as cancelled.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True

        for ctx in self._contexts:
            try:
                ctx.submit(_cancel_pending_tasks()).result(timeout)
            except concurrent.futures.TimeoutError:
                logger.warning(
                    "Pending tasks did not finish cancelling", extra={"context": ctx.name}
                )
            ctx.loop.call_soon_threadsafe(ctx.loop.stop)
        for thread in self._threads:
            thread.join(timeout)
        for ctx in self._contexts:
            if not ctx.loop.is_running():
                ctx.loop.close()
        logger.debug("Shut down event loop group", extra={"size": len(self._contexts)})

    def __enter__(self) -> EventLoopGroup:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()


async def _cancel_pending_tasks() -> None:
    current = asyncio.current_task()
    tasks = [task for task in asyncio.all_tasks() if task is not current]
    for task in tasks:
        task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)
    await asyncio.get_running_loop().shutdown_asyncgens()


def resolve_context(
    context: ExecutionContext | None = None,
    group: EventLoopGroup | None = None,
) -> ExecutionContext:
    """Choose the context a new session is bound to.

    Selection order: an explicit context, then one taken from the group,
    then the loop running in the caller. The result is fixed for the
    session's lifetime.

    Args:
        context: Explicit context chosen by the caller
        group: Pool to take a context from when none is given

    Returns:
        The context the session is bound to

    Raises:
        SessionStateError: If neither argument is given and no loop is running
    """
    if context is not None:
        return context
    if group is not None:
        return group.next()
    return ExecutionContext.current()
