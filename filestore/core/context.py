"""
Execution contexts on which async results are delivered.

An async call captures the caller's context when it is issued and the
background worker hands the callback back to it, so callbacks run where they
were requested, not where the work executed.
"""

from __future__ import annotations

import asyncio
import contextlib
import contextvars
import queue
from collections.abc import Callable, Iterator
from typing import Any, Protocol


class ExecutionContext(Protocol):
    def submit(self, fn: Callable[..., Any], *args: Any) -> None: ...


class LoopContext:
    """Delivers onto an asyncio event loop, from any thread."""

    def __init__(self, loop: asyncio.AbstractEventLoop):
        self.loop = loop

    def submit(self, fn: Callable[..., Any], *args: Any) -> None:
        self.loop.call_soon_threadsafe(fn, *args)

    def __repr__(self) -> str:
        return f"LoopContext({self.loop!r})"


class InlineContext:
    """Runs the callback immediately, on whichever thread submits it."""

    def submit(self, fn: Callable[..., Any], *args: Any) -> None:
        fn(*args)

    def __repr__(self) -> str:
        return "InlineContext()"


class CallbackQueue:
    """
    Callback queue for a plain thread without an event loop.

    Workers push callbacks from any thread; the owning thread runs them by
    calling run_next() or drain().
    """

    def __init__(self) -> None:
        self._queue: queue.SimpleQueue[tuple[Callable[..., Any], tuple[Any, ...]]] = (
            queue.SimpleQueue()
        )

    def submit(self, fn: Callable[..., Any], *args: Any) -> None:
        self._queue.put((fn, args))

    def run_next(self, timeout: float | None = None) -> bool:
        """Wait for one callback and run it. False when the timeout expires first."""
        try:
            fn, args = self._queue.get(timeout=timeout)
        except queue.Empty:
            return False
        fn(*args)
        return True

    def drain(self) -> int:
        """Run every callback already queued, without blocking."""
        count = 0
        while True:
            try:
                fn, args = self._queue.get_nowait()
            except queue.Empty:
                return count
            fn(*args)
            count += 1

    def __len__(self) -> int:
        return self._queue.qsize()


_bound: contextvars.ContextVar[ExecutionContext | None] = contextvars.ContextVar(
    "filestore_bound_context", default=None
)


@contextlib.contextmanager
def bind_context(ctx: ExecutionContext) -> Iterator[ExecutionContext]:
    """Make ctx the caller context of async calls issued inside the block."""
    token = _bound.set(ctx)
    try:
        yield ctx
    finally:
        _bound.reset(token)


def current_context() -> ExecutionContext:
    """Bound context, else the running event loop, else inline delivery."""
    ctx = _bound.get()
    if ctx is not None:
        return ctx
    try:
        return LoopContext(asyncio.get_running_loop())
    except RuntimeError:
        # Pas de boucle en cours : livraison sur le thread worker
        return InlineContext()
