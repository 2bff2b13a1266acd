"""
Guard conditions deciding whether rules and components apply.

A condition is a predicate over the ValidationContext, declared either
synchronous or asynchronous, and tagged with the ConditionScope describing
where it is attached. Conditions compose with ``&``, ``|`` and ``~``.
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Optional, Union

from gotvalid.core.errors import AsyncValidatorInvokedSynchronouslyError
from gotvalid.core.types import ConditionScope
from gotvalid.interfaces.types import ConditionCheck
from gotvalid.runtime.async_support import discard_awaitable, is_async_callable, resolve


class Condition:
    """Represents a guard condition attached to a rule or a component.

    Sync conditions may be evaluated on both execution paths; async
    conditions only on the async path.

    Shared conditions are cached in the validation context, keyed by the
    underlying predicate, so every rule sharing one is evaluated at most once
    per validation run.
    """

    def __init__(
        self,
        predicate: ConditionCheck,
        scope: ConditionScope = ConditionScope.COMPONENT,
        is_async: Optional[bool] = None,
    ) -> None:
        """Initialize a Condition instance.

        Args:
            predicate: Function taking the validation context and returning bool
                (or an awaitable of bool for async conditions)
            scope: Attachment point of the condition
            is_async: Force the async flag; inferred from the predicate if None

        Raises:
            TypeError: If predicate is not callable
            ValueError: If scope is not a ConditionScope
        """
        if not callable(predicate):
            raise TypeError("Condition predicate must be callable")
        if not isinstance(scope, ConditionScope):
            raise ValueError("Condition scope must be a ConditionScope enum value")
        self._predicate = predicate
        self._scope = scope
        self._is_async = is_async_callable(predicate) if is_async is None else bool(is_async)

    @property
    def predicate(self) -> ConditionCheck:
        return self._predicate

    @property
    def scope(self) -> ConditionScope:
        return self._scope

    @property
    def is_async(self) -> bool:
        return self._is_async

    @property
    def key(self) -> Any:
        """Cache key for shared evaluation."""
        return self._predicate

    def with_scope(self, scope: ConditionScope) -> "Condition":
        """Return a copy of this condition attached at another scope."""
        return Condition(self._predicate, scope, self._is_async)

    def evaluate(self, context) -> bool:
        """Evaluate the condition on the synchronous path.

        Raises:
            AsyncValidatorInvokedSynchronouslyError: If the condition is asynchronous
        """
        if self._is_async:
            raise AsyncValidatorInvokedSynchronouslyError("Condition")
        result = self._predicate(context)
        if inspect.isawaitable(result):
            discard_awaitable(result)
            raise AsyncValidatorInvokedSynchronouslyError("Condition")
        return bool(result)

    async def evaluate_async(self, context) -> bool:
        """Evaluate the condition, awaiting it if it is asynchronous."""
        return bool(await resolve(self._predicate(context)))

    def evaluate_shared(self, context) -> bool:
        """Evaluate once per run, reusing the cached result afterwards."""
        cache = context.shared_conditions
        if self.key not in cache:
            cache[self.key] = self.evaluate(context)
        return cache[self.key]

    async def evaluate_shared_async(self, context) -> bool:
        """Async counterpart of evaluate_shared.

        The pending evaluation itself is cached so concurrent branches await
        the same result instead of evaluating twice.
        """
        cache = context.shared_conditions
        if self.key not in cache:
            cache[self.key] = asyncio.ensure_future(self.evaluate_async(context))
        cached = cache[self.key]
        if isinstance(cached, asyncio.Future):
            return await cached
        return cached

    def __and__(self, other: "Condition") -> "Condition":
        """Compose two conditions with AND logic."""
        if self._is_async or other.is_async:

            async def both(context):
                return await self.evaluate_async(context) and await other.evaluate_async(context)

            return Condition(both, self._scope, True)
        return Condition(lambda context: self.evaluate(context) and other.evaluate(context), self._scope, False)

    def __or__(self, other: "Condition") -> "Condition":
        """Compose two conditions with OR logic."""
        if self._is_async or other.is_async:

            async def either(context):
                return await self.evaluate_async(context) or await other.evaluate_async(context)

            return Condition(either, self._scope, True)
        return Condition(lambda context: self.evaluate(context) or other.evaluate(context), self._scope, False)

    def __invert__(self) -> "Condition":
        """Negate the condition."""
        if self._is_async:

            async def negated(context):
                return not await self.evaluate_async(context)

            return Condition(negated, self._scope, True)
        return Condition(lambda context: not self.evaluate(context), self._scope, False)

    def __repr__(self) -> str:
        kind = "async" if self._is_async else "sync"
        return f"Condition({self._scope.name}, {kind})"


def as_condition(
    condition: Union[Condition, ConditionCheck],
    scope: ConditionScope,
    is_async: Optional[bool] = None,
) -> Condition:
    """
    Coerce a callable or Condition into a Condition attached at the given scope.
    """
    if isinstance(condition, Condition):
        if is_async is not None and condition.is_async != bool(is_async):
            raise ValueError("Condition async flag does not match the requested kind")
        return condition if condition.scope is scope else condition.with_scope(scope)
    return Condition(condition, scope, is_async)
