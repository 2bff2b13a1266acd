# gotvalid/core/components.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import inspect
from dataclasses import replace
from typing import Any, Optional, Union

from gotvalid.core.conditions import Condition, as_condition
from gotvalid.core.context import PropertyContext
from gotvalid.core.errors import AsyncValidatorInvokedSynchronouslyError, RuleSealedError
from gotvalid.core.failures import ValidationFailure
from gotvalid.core.types import ConditionScope, Severity
from gotvalid.interfaces.types import ConditionCheck, MessageFactory, Predicate, StateFactory
from gotvalid.runtime.async_support import discard_awaitable, is_async_callable, resolve

DEFAULT_MESSAGE = "The specified condition was not met for '{}'."


class RuleComponent:
    """
    One validator predicate within a rule, together with its own guarding
    conditions and the factories used to describe a failure.

    The predicate is called as ``predicate(value, context)`` where context is
    the ValidationContext of the run. It returns True when the value is valid.
    """

    def __init__(
        self,
        predicate: Predicate,
        name: Optional[str] = None,
        is_async: Optional[bool] = None,
        error_message: Optional[str] = None,
        message_factory: Optional[MessageFactory] = None,
        state_factory: Optional[StateFactory] = None,
        severity: Severity = Severity.ERROR,
        error_code: Optional[str] = None,
    ) -> None:
        """
        :param predicate: Callable ``(value, context) -> bool`` or its async counterpart.
        :param name: Identifies the validator, defaults to the predicate's name.
        :param is_async: Force the async flag; inferred from the predicate if None.
        :param error_message: Static failure message.
        :param message_factory: Builds the failure message, takes precedence over error_message.
        :param state_factory: Builds custom state attached to the failure.
        :param severity: Severity of failures produced by this component.
        :param error_code: Error code, defaults to the component name.
        """
        if not callable(predicate):
            raise TypeError("Validator predicate must be callable")
        self._predicate = predicate
        self._name = name or getattr(predicate, "__name__", type(predicate).__name__)
        self._is_async = is_async_callable(predicate) if is_async is None else bool(is_async)
        self._error_message = error_message
        self._message_factory = message_factory
        self._state_factory = state_factory
        self._severity = severity
        self._error_code = error_code
        self._condition: Optional[Condition] = None
        self._async_condition: Optional[Condition] = None
        self._sealed = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def predicate(self) -> Predicate:
        return self._predicate

    @property
    def is_async(self) -> bool:
        """True if the predicate can only run on the async path."""
        return self._is_async

    @property
    def has_condition(self) -> bool:
        return self._condition is not None

    @property
    def has_async_condition(self) -> bool:
        return self._async_condition is not None

    @property
    def severity(self) -> Severity:
        return self._severity

    @property
    def error_code(self) -> str:
        return self._error_code or self._name

    @property
    def error_message(self) -> Optional[str]:
        return self._error_message

    @property
    def is_sealed(self) -> bool:
        return self._sealed

    def seal(self) -> None:
        self._sealed = True

    def _check_mutable(self) -> None:
        if self._sealed:
            raise RuleSealedError(f"Component '{self._name}' cannot be modified after it has been sealed")

    def apply_condition(self, condition: Union[Condition, ConditionCheck]) -> None:
        """
        Guard this component with a synchronous condition over the context.
        A second call combines both conditions with AND.
        """
        self._check_mutable()
        new = as_condition(condition, ConditionScope.COMPONENT, is_async=False)
        self._condition = new if self._condition is None else self._condition & new

    def apply_async_condition(self, condition: Union[Condition, ConditionCheck]) -> None:
        """Guard this component with an asynchronous condition over the context."""
        self._check_mutable()
        new = as_condition(condition, ConditionScope.COMPONENT, is_async=True)
        self._async_condition = new if self._async_condition is None else self._async_condition & new

    def set_error_message(self, message: str) -> None:
        self._check_mutable()
        self._error_message = message

    def set_message_factory(self, factory: MessageFactory) -> None:
        self._check_mutable()
        self._message_factory = factory

    def set_state_factory(self, factory: StateFactory) -> None:
        self._check_mutable()
        self._state_factory = factory

    def set_severity(self, severity: Severity) -> None:
        self._check_mutable()
        if not isinstance(severity, Severity):
            raise ValueError("Severity must be a Severity enum value")
        self._severity = severity

    def set_error_code(self, error_code: str) -> None:
        self._check_mutable()
        self._error_code = error_code

    def evaluate(self, ctx: PropertyContext) -> Optional[ValidationFailure]:
        """
        Run the component on the synchronous path.

        :param ctx: The invocation context.
        :return: A failure, or None if the value passed or the component was skipped.
        :raises AsyncValidatorInvokedSynchronouslyError: If the component needs the async path.
        """
        if self._async_condition is not None:
            raise AsyncValidatorInvokedSynchronouslyError(f"Condition of '{self._name}'", ctx.property_name)
        if self._is_async:
            raise AsyncValidatorInvokedSynchronouslyError(f"Validator '{self._name}'", ctx.property_name)

        validation_context = ctx.validation_context
        if self._condition is not None and not self._condition.evaluate(validation_context):
            return None

        result = self._predicate(ctx.property_value, validation_context)
        if inspect.isawaitable(result):
            discard_awaitable(result)
            raise AsyncValidatorInvokedSynchronouslyError(f"Validator '{self._name}'", ctx.property_name)
        if result:
            return None
        return self._create_failure(ctx)

    async def evaluate_async(self, ctx: PropertyContext) -> Optional[ValidationFailure]:
        """
        Run the component on the async path. Sync conditions and predicates are
        called directly, async ones are awaited.
        """
        validation_context = ctx.validation_context
        if self._async_condition is not None and not await self._async_condition.evaluate_async(validation_context):
            return None
        if self._condition is not None and not await self._condition.evaluate_async(validation_context):
            return None

        if await resolve(self._predicate(ctx.property_value, validation_context)):
            return None
        return self._create_failure(ctx)

    def _create_failure(self, ctx: PropertyContext) -> ValidationFailure:
        if self._message_factory is not None:
            message = self._message_factory(ctx)
        elif self._error_message is not None:
            message = self._error_message
        else:
            message = DEFAULT_MESSAGE.format(ctx.display_name)

        message_builder = getattr(ctx.rule, "message_builder", None)
        if message_builder is not None:
            message = message_builder(replace(ctx, message=message))

        state = self._state_factory(ctx) if self._state_factory is not None else None
        return ValidationFailure(
            property_name=ctx.property_name,
            error_message=message,
            attempted_value=ctx.property_value,
            severity=self._severity,
            error_code=self.error_code,
            custom_state=state,
        )

    def __repr__(self) -> str:
        return f"RuleComponent({self._name!r})"
