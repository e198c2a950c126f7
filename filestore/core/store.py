from __future__ import annotations

import contextlib
import logging
import os
import tempfile
from collections.abc import Callable
from concurrent.futures import Executor, Future
from pathlib import Path
from typing import Any, Generic, TypeVar

from filestore.core.codec import JsonCodec
from filestore.core.context import ExecutionContext, current_context
from filestore.core.errors import NotFound, StoreError, WriteError
from filestore.core.futures import OnFailure, OneShot
from filestore.core.location import Location, resolve_location
from filestore.core.publisher import Publisher
from filestore.core.workers import get_executor

logger = logging.getLogger(__name__)

V = TypeVar("V")


class TypedFileStore(Generic[V]):
    """
    One JSON-encoded value of type V stored in a single file.

    No cache: every read re-reads the file, every write overwrites it in full.
    Writes are a plain overwrite unless ``atomic=True`` (temp file, then
    os.replace). Concurrent writers get last-write-wins, nothing more.
    """

    def __init__(
        self,
        location: Location,
        value_type: Any,
        *,
        atomic: bool = False,
        executor: Executor | None = None,
        codec: JsonCodec[V] | None = None,
    ):
        self._location = resolve_location(location)
        self._value_type = value_type
        self._atomic = atomic
        self._executor = executor
        self._codec: JsonCodec[V] = codec or JsonCodec(value_type)

    @property
    def location(self) -> Path:
        return self._location

    @property
    def value_type(self) -> Any:
        return self._value_type

    @property
    def atomic(self) -> bool:
        return self._atomic

    def __repr__(self) -> str:
        return f"TypedFileStore({str(self._location)!r}, {self._codec.type_name})"

    # --- primitives ---

    def read_raw(self) -> bytes:
        try:
            data = self._location.read_bytes()
        except OSError as e:
            raise NotFound(f"cannot read {self._location}: {e}", self._location) from e
        logger.debug("read %d bytes from %s", len(data), self._location)
        return data

    def write_raw(self, data: bytes) -> None:
        try:
            if self._atomic:
                self._replace(data)
            else:
                self._location.write_bytes(data)
        except OSError as e:
            raise WriteError(f"cannot write {self._location}: {e}", self._location) from e
        logger.debug("wrote %d bytes to %s", len(data), self._location)

    def _replace(self, data: bytes) -> None:
        # Un fichier temporaire par écriture
        fd, tmp_name = tempfile.mkstemp(
            dir=self._location.parent, prefix=f".{self._location.name}.", suffix=".tmp"
        )
        tmp = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp, self._location)
        except OSError:
            with contextlib.suppress(OSError):
                tmp.unlink(missing_ok=True)
            raise

    # --- blocking ---

    def read(self) -> V:
        data = self.read_raw()
        try:
            return self._codec.decode(data)
        except StoreError as e:
            e.location = self._location
            raise

    def write(self, value: V) -> None:
        try:
            data = self._codec.encode(value)
        except StoreError as e:
            e.location = self._location
            raise
        self.write_raw(data)

    # --- callbacks ---

    def read_async(
        self,
        on_success: Callable[[V], None],
        on_failure: Callable[[BaseException], None],
        *,
        context: ExecutionContext | None = None,
    ) -> None:
        """Run read() in the background; deliver the outcome on the caller context."""
        self._dispatch(self.read, (), on_success, on_failure, context, with_value=True)

    def write_async(
        self,
        value: V,
        on_success: Callable[[], None],
        on_failure: Callable[[BaseException], None],
        *,
        context: ExecutionContext | None = None,
    ) -> None:
        self._dispatch(self.write, (value,), on_success, on_failure, context, with_value=False)

    def _dispatch(
        self,
        op: Callable[..., Any],
        args: tuple[Any, ...],
        on_success: Callable[..., None],
        on_failure: Callable[[BaseException], None],
        context: ExecutionContext | None,
        *,
        with_value: bool,
    ) -> None:
        # Le contexte appelant est capturé ici, pas dans le worker
        ctx = context if context is not None else current_context()

        def work() -> None:
            try:
                result = op(*args)
            except Exception as e:
                ctx.submit(on_failure, e)
                return
            if with_value:
                ctx.submit(on_success, result)
            else:
                ctx.submit(on_success)

        executor = self._executor or get_executor()
        logger.debug("dispatching %s on %s for %s", op.__name__, ctx, self._location)
        executor.submit(work).add_done_callback(self._report_delivery_failure)

    def _report_delivery_failure(self, fut: Future[None]) -> None:
        # Échec de livraison (boucle fermée, callback inline qui lève...)
        if fut.cancelled():
            return
        exc = fut.exception()
        if exc is not None:
            logger.error("result delivery failed for %s", self._location, exc_info=exc)

    # --- futures ---

    def read_future(self) -> OneShot[V]:
        def start(ctx: ExecutionContext, ok: Callable[[V], None], fail: OnFailure) -> None:
            self.read_async(ok, fail, context=ctx)

        return OneShot(start)

    def write_future(self, value: V) -> OneShot[None]:
        def start(ctx: ExecutionContext, ok: Callable[[None], None], fail: OnFailure) -> None:
            self.write_async(value, lambda: ok(None), fail, context=ctx)

        return OneShot(start)

    # --- publishers ---

    def read_publisher(self) -> Publisher[V]:
        return Publisher(self.read_future)

    def write_publisher(self, value: V) -> Publisher[None]:
        return Publisher(lambda: self.write_future(value))
