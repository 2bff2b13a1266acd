# tests/unit/test_async_support.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import asyncio
import functools
from unittest.mock import MagicMock

import pytest

from gotvalid.runtime.async_support import discard_awaitable, gather_in_order, is_async_callable, resolve


async def _async_fn(value):
    return value


def _sync_fn(value):
    return value


class _AsyncCallable:
    async def __call__(self, value):
        return value


class _SyncCallable:
    def __call__(self, value):
        return value


class _Holder:
    async def check(self, value):
        return value

    def plain(self, value):
        return value


def test_is_async_callable():
    holder = _Holder()
    assert is_async_callable(_async_fn)
    assert is_async_callable(functools.partial(_async_fn))
    assert is_async_callable(functools.partial(functools.partial(_async_fn)))
    assert is_async_callable(holder.check)
    assert is_async_callable(_AsyncCallable())
    assert not is_async_callable(_sync_fn)
    assert not is_async_callable(functools.partial(_sync_fn, 1))
    assert not is_async_callable(holder.plain)
    assert not is_async_callable(_SyncCallable())
    assert not is_async_callable(lambda value: value)
    assert not is_async_callable(MagicMock())


def test_discard_awaitable_closes_coroutine():
    coro = _async_fn(1)
    discard_awaitable(coro)
    with pytest.raises(RuntimeError):
        coro.send(None)
    discard_awaitable(1)


@pytest.mark.asyncio
async def test_resolve():
    assert await resolve(1) == 1
    assert await resolve(_async_fn(2)) == 2


@pytest.mark.asyncio
async def test_gather_in_order_keeps_submission_order():
    async def delayed(value, delay):
        await asyncio.sleep(delay)
        return value

    results = await gather_in_order([delayed("a", 0.03), delayed("b", 0.0), delayed("c", 0.01)])
    assert results == ["a", "b", "c"]


@pytest.mark.asyncio
async def test_gather_in_order_empty():
    assert await gather_in_order([]) == []


@pytest.mark.asyncio
async def test_gather_in_order_cancels_siblings_on_error():
    cancelled = asyncio.Event()

    async def slow():
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.set()
            raise

    async def fail():
        await asyncio.sleep(0)
        raise ValueError("bad")

    with pytest.raises(ValueError, match="bad"):
        await gather_in_order([slow(), fail()])
    assert cancelled.is_set()
