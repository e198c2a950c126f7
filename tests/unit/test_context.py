import asyncio
import threading

import pytest

from filestore.core.context import (
    CallbackQueue,
    InlineContext,
    LoopContext,
    bind_context,
    current_context,
)


def test_inline_context_runs_immediately():
    seen = []
    InlineContext().submit(seen.append, 1)
    assert seen == [1]


def test_callback_queue_runs_on_owning_thread():
    q = CallbackQueue()
    seen = []

    def record(x):
        seen.append((x, threading.get_ident()))

    t = threading.Thread(target=lambda: q.submit(record, "hi"))
    t.start()
    t.join()

    assert len(q) == 1
    assert q.run_next(timeout=1) is True
    assert seen == [("hi", threading.get_ident())]


def test_callback_queue_timeout_and_drain():
    q = CallbackQueue()
    assert q.run_next(timeout=0.01) is False
    assert q.drain() == 0

    seen = []
    for i in range(3):
        q.submit(seen.append, i)
    assert q.drain() == 3
    assert seen == [0, 1, 2]


def test_current_context_without_loop_is_inline():
    assert isinstance(current_context(), InlineContext)


def test_bind_context_is_scoped():
    q = CallbackQueue()
    with bind_context(q) as ctx:
        assert ctx is q
        assert current_context() is q
    assert isinstance(current_context(), InlineContext)


@pytest.mark.asyncio
async def test_current_context_inside_loop():
    ctx = current_context()
    assert isinstance(ctx, LoopContext)
    assert ctx.loop is asyncio.get_running_loop()


@pytest.mark.asyncio
async def test_loop_context_delivers_from_other_thread_onto_loop():
    loop = asyncio.get_running_loop()
    done = loop.create_future()
    ctx = LoopContext(loop)

    t = threading.Thread(target=lambda: ctx.submit(lambda: done.set_result(threading.get_ident())))
    t.start()
    t.join()

    assert await asyncio.wait_for(done, 1) == threading.get_ident()
