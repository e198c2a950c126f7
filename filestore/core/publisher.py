from __future__ import annotations

import threading
from collections.abc import AsyncIterator, Callable
from typing import Generic, TypeVar

from filestore.core.context import ExecutionContext
from filestore.core.futures import OneShot

T = TypeVar("T")


class Subscription:
    """Handle returned by Publisher.subscribe. cancel() stops delivery only."""

    def __init__(self) -> None:
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()


class Publisher(Generic[T]):
    """
    Cold single-emission stream: emits one value then completes, or one error.

    Each subscription builds a fresh OneShot from the factory, so every
    subscriber triggers its own execution and nothing is shared or cached.
    """

    def __init__(self, factory: Callable[[], OneShot[T]]):
        self._factory = factory

    def subscribe(
        self,
        on_next: Callable[[T], None],
        on_error: Callable[[BaseException], None],
        on_complete: Callable[[], None] | None = None,
        *,
        context: ExecutionContext | None = None,
    ) -> Subscription:
        subscription = Subscription()

        def ok(value: T) -> None:
            if subscription.cancelled:
                return
            on_next(value)
            if on_complete is not None:
                on_complete()

        def fail(exc: BaseException) -> None:
            if not subscription.cancelled:
                on_error(exc)

        self._factory().observe(ok, fail, context=context)
        return subscription

    async def first(self) -> T:
        """Subscribe once and return the value, or raise the error."""
        return await self._factory()

    def __aiter__(self) -> AsyncIterator[T]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[T]:
        yield await self._factory()
