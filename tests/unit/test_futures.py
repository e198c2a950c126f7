import asyncio
import threading

import pytest

from filestore.core.context import InlineContext
from filestore.core.futures import OneShot


def later(ctx, fn, *args):
    threading.Thread(target=lambda: ctx.submit(fn, *args)).start()


@pytest.mark.asyncio
async def test_nothing_runs_until_awaited():
    calls = []

    def start(ctx, ok, fail):
        calls.append(ctx)
        later(ctx, ok, 5)

    shot = OneShot(start)
    await asyncio.sleep(0)
    assert calls == []
    assert shot.claimed is False

    assert await shot == 5
    assert len(calls) == 1
    assert shot.claimed is True


@pytest.mark.asyncio
async def test_failure_is_raised_on_await():
    shot = OneShot(lambda ctx, ok, fail: later(ctx, fail, KeyError("boom")))
    with pytest.raises(KeyError):
        await shot


@pytest.mark.asyncio
async def test_single_observer_only():
    shot = OneShot(lambda ctx, ok, fail: later(ctx, ok, 1))
    assert await shot == 1
    with pytest.raises(RuntimeError):
        await shot
    with pytest.raises(RuntimeError):
        shot.result()


def test_result_blocks_until_settled():
    shot = OneShot(lambda ctx, ok, fail: later(ctx, ok, "done"))
    assert shot.result(timeout=5) == "done"


def test_result_reraises_failure():
    shot = OneShot(lambda ctx, ok, fail: later(ctx, fail, ValueError("nope")))
    with pytest.raises(ValueError):
        shot.result(timeout=5)


def test_result_timeout_when_never_settled():
    shot = OneShot(lambda ctx, ok, fail: None)
    with pytest.raises(TimeoutError):
        shot.result(timeout=0.05)


def test_settles_exactly_once():
    def unruly(ctx, ok, fail):
        ok(1)
        fail(RuntimeError("late"))
        ok(2)

    successes, failures = [], []
    OneShot(unruly).observe(successes.append, failures.append, context=InlineContext())
    assert successes == [1]
    assert failures == []
