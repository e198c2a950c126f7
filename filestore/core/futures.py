from __future__ import annotations

import asyncio
import threading
from collections.abc import Callable, Generator
from typing import Any, Generic, TypeVar

from filestore.core.context import ExecutionContext, InlineContext, LoopContext, current_context

T = TypeVar("T")

OnSuccess = Callable[[T], None]
OnFailure = Callable[[BaseException], None]
Start = Callable[[ExecutionContext, OnSuccess[T], OnFailure], None]


class OneShot(Generic[T]):
    """
    Single-shot lazy computation built over a callback-style start function.

    Nothing runs until the first observer shows up: ``await``, ``result()`` or
    ``observe()``. It settles exactly once and accepts a single observer; for
    several independent consumers use a Publisher instead.
    """

    def __init__(self, start: Start[T]):
        self._start = start
        self._claimed = False
        self._lock = threading.Lock()

    @property
    def claimed(self) -> bool:
        return self._claimed

    def _claim(self) -> None:
        with self._lock:
            if self._claimed:
                raise RuntimeError("OneShot already observed: it settles only once")
            self._claimed = True

    def observe(
        self,
        on_success: OnSuccess[T],
        on_failure: OnFailure,
        *,
        context: ExecutionContext | None = None,
    ) -> None:
        self._claim()
        settled = threading.Lock()

        def ok(value: T) -> None:
            if settled.acquire(blocking=False):
                on_success(value)

        def fail(exc: BaseException) -> None:
            if settled.acquire(blocking=False):
                on_failure(exc)

        self._start(context if context is not None else current_context(), ok, fail)

    def result(self, timeout: float | None = None) -> T:
        """Block the calling thread until settled. The work is not cancelled on timeout."""
        done = threading.Event()
        outcome: list[tuple[bool, Any]] = []

        def ok(value: T) -> None:
            outcome.append((True, value))
            done.set()

        def fail(exc: BaseException) -> None:
            outcome.append((False, exc))
            done.set()

        self.observe(ok, fail, context=InlineContext())
        if not done.wait(timeout):
            raise TimeoutError(f"OneShot not settled after {timeout}s")
        succeeded, payload = outcome[0]
        if succeeded:
            return payload
        raise payload

    def __await__(self) -> Generator[Any, None, T]:
        return self._wait().__await__()

    async def _wait(self) -> T:
        loop = asyncio.get_running_loop()
        fut: asyncio.Future[T] = loop.create_future()

        # fut peut déjà être annulé si l'appelant a abandonné l'await
        def ok(value: T) -> None:
            if not fut.done():
                fut.set_result(value)

        def fail(exc: BaseException) -> None:
            if not fut.done():
                fut.set_exception(exc)

        self.observe(ok, fail, context=LoopContext(loop))
        return await fut
