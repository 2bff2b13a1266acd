# gotvalid/runtime/async_support.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import asyncio
import functools
import inspect
from typing import Any, Awaitable, Iterable, List, TypeVar

T = TypeVar("T")


def is_async_callable(fn: Any) -> bool:
    """
    Return True if calling fn produces a coroutine. Handles bound methods,
    functools.partial and objects with an async __call__.
    """
    while isinstance(fn, functools.partial):
        fn = fn.func
    if inspect.iscoroutinefunction(fn):
        return True
    if inspect.isfunction(fn) or inspect.ismethod(fn):
        return False
    return inspect.iscoroutinefunction(getattr(type(fn), "__call__", None))


def discard_awaitable(result: Any) -> None:
    """Close a coroutine that will never be awaited so it does not warn."""
    if inspect.iscoroutine(result):
        result.close()


async def resolve(result: Any) -> Any:
    """
    Await the result if it is awaitable, otherwise return it unchanged. Lets
    the async path accept sync and async callables alike.
    """
    if inspect.isawaitable(result):
        return await result
    return result


async def gather_in_order(awaitables: Iterable[Awaitable[T]]) -> List[T]:
    """
    Run awaitables concurrently and return their results in submission order.

    If one of them raises, the others are cancelled and the error propagates.
    """
    tasks = [asyncio.ensure_future(a) for a in awaitables]
    if not tasks:
        return []
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            if not task.done():
                task.cancel()
        # Let cancelled tasks unwind before propagating
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
