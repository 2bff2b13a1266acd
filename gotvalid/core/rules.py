# gotvalid/core/rules.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import inspect
import logging
from typing import Any, Iterable, List, Optional, Tuple, Union

from gotvalid.core.components import RuleComponent
from gotvalid.core.conditions import Condition, as_condition
from gotvalid.core.context import PropertyContext, ValidationContext
from gotvalid.core.errors import AsyncValidatorInvokedSynchronouslyError, RuleSealedError
from gotvalid.core.failures import ValidationFailure
from gotvalid.core.members import MemberDescriptor
from gotvalid.core.types import ApplyConditionTo, CascadeMode, ConditionScope
from gotvalid.interfaces.types import ConditionCheck, DisplayNameFactory, FailureHook, MessageFactory
from gotvalid.runtime.async_support import discard_awaitable, resolve

logger = logging.getLogger(__name__)

_SCOPES = {
    ApplyConditionTo.ALL_COMPONENTS: ConditionScope.RULE_ALL,
    ApplyConditionTo.FIRST_COMPONENT: ConditionScope.RULE_FIRST_ONLY,
}


class ValidationRule:
    """
    An ordered sequence of rule components bound to one member of the value
    under validation.

    Components run in insertion order. The rule's conditions decide whether
    they run at all, its cascade mode decides whether a failure stops the
    remaining components, and its dependent rules are run by the executor only
    when this rule produced no failures.

    Components can be added until the rule is sealed, which the executor does
    on first execution. Dependent rules may still be attached after sealing.
    """

    def __init__(
        self,
        member: MemberDescriptor,
        cascade_mode: CascadeMode = CascadeMode.CONTINUE,
        rule_sets: Optional[Iterable[str]] = None,
        display_name: Optional[Union[str, DisplayNameFactory]] = None,
        property_name: Optional[str] = None,
    ) -> None:
        """
        :param member: Descriptor of the validated member.
        :param cascade_mode: Whether the first failing component stops the rule.
        :param rule_sets: Rule-set tags; empty means the default set.
        :param display_name: Static display name or a factory taking the context.
        :param property_name: Property name used in failures, defaults to the member name.
        """
        if member is None:
            raise ValueError("A rule requires a member descriptor")
        if not isinstance(cascade_mode, CascadeMode):
            raise ValueError("Cascade mode must be a CascadeMode enum value")
        self._member = member
        self._cascade_mode = cascade_mode
        self._rule_sets = self._normalize_rule_sets(rule_sets)
        self._display_name = display_name
        self._property_name = property_name if property_name is not None else member.name
        self._components: List[RuleComponent] = []
        self._conditions: List[Condition] = []
        self._dependent_rules: List[ValidationRule] = []
        self._on_failure: Optional[FailureHook] = None
        self._message_builder: Optional[MessageFactory] = None
        self._sealed = False

    @staticmethod
    def _normalize_rule_sets(rule_sets: Optional[Iterable[str]]) -> Tuple[str, ...]:
        if isinstance(rule_sets, str):
            rule_sets = [rule_sets]
        names = tuple(rule_sets or ())
        if not all(isinstance(name, str) and name for name in names):
            raise ValueError("Rule-set names must be non-empty strings")
        return names

    def _check_mutable(self) -> None:
        if self._sealed:
            raise RuleSealedError(f"Rule for '{self._property_name}' cannot be modified after it has been sealed")

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def member(self) -> MemberDescriptor:
        return self._member

    @property
    def type_to_validate(self) -> type:
        """Declared type of the validated member."""
        return self._member.declared_type

    @property
    def components(self) -> Tuple[RuleComponent, ...]:
        return tuple(self._components)

    @property
    def current(self) -> Optional[RuleComponent]:
        """The most recently added component, or None for an empty rule."""
        return self._components[-1] if self._components else None

    @property
    def cascade_mode(self) -> CascadeMode:
        return self._cascade_mode

    @cascade_mode.setter
    def cascade_mode(self, mode: CascadeMode) -> None:
        self._check_mutable()
        if not isinstance(mode, CascadeMode):
            raise ValueError("Cascade mode must be a CascadeMode enum value")
        self._cascade_mode = mode

    @property
    def rule_sets(self) -> Tuple[str, ...]:
        return self._rule_sets

    @rule_sets.setter
    def rule_sets(self, rule_sets: Iterable[str]) -> None:
        self._check_mutable()
        self._rule_sets = self._normalize_rule_sets(rule_sets)

    @property
    def property_name(self) -> Optional[str]:
        return self._property_name

    @property_name.setter
    def property_name(self, name: Optional[str]) -> None:
        self._check_mutable()
        self._property_name = name

    @property
    def conditions(self) -> Tuple[Condition, ...]:
        return tuple(self._conditions)

    @property
    def has_condition(self) -> bool:
        """Whether the rule or any of its components carries a sync condition."""
        return any(not c.is_async for c in self._conditions) or any(c.has_condition for c in self._components)

    @property
    def has_async_condition(self) -> bool:
        """Whether the rule or any of its components carries an async condition."""
        return any(c.is_async for c in self._conditions) or any(c.has_async_condition for c in self._components)

    @property
    def dependent_rules(self) -> List["ValidationRule"]:
        return self._dependent_rules

    @property
    def on_failure(self) -> Optional[FailureHook]:
        return self._on_failure

    @on_failure.setter
    def on_failure(self, hook: Optional[FailureHook]) -> None:
        self._check_mutable()
        self._on_failure = hook

    @property
    def message_builder(self) -> Optional[MessageFactory]:
        return self._message_builder

    @message_builder.setter
    def message_builder(self, builder: Optional[MessageFactory]) -> None:
        self._check_mutable()
        self._message_builder = builder

    @property
    def is_sealed(self) -> bool:
        return self._sealed

    def add(self, component: RuleComponent) -> None:
        """
        Append a component. Insertion order is execution order.

        :raises RuleSealedError: If the rule has been sealed.
        """
        self._check_mutable()
        if not isinstance(component, RuleComponent):
            raise TypeError("Only RuleComponent instances can be added to a rule")
        self._components.append(component)

    def set_display_name(self, name: Union[str, DisplayNameFactory, None]) -> None:
        """Set a static display name, or a factory invoked with the validation context."""
        self._check_mutable()
        self._display_name = name

    def get_display_name(self, context: Optional[ValidationContext] = None) -> Optional[str]:
        """
        Resolve the display name: factory first, then static name, then the member name.
        """
        if callable(self._display_name):
            return self._display_name(context)
        if self._display_name is not None:
            return self._display_name
        return self._member.name

    def apply_condition(
        self,
        predicate: Union[Condition, ConditionCheck],
        apply_to: ApplyConditionTo = ApplyConditionTo.ALL_COMPONENTS,
    ) -> None:
        """
        Guard the rule with a sync condition over the context.

        :param predicate: Condition or callable taking the validation context.
        :param apply_to: Gate every component, or only the first one.
        """
        self._check_mutable()
        self._conditions.append(as_condition(predicate, _SCOPES[apply_to], is_async=False))

    def apply_async_condition(
        self,
        predicate: Union[Condition, ConditionCheck],
        apply_to: ApplyConditionTo = ApplyConditionTo.ALL_COMPONENTS,
    ) -> None:
        """Async counterpart of apply_condition. Only usable on the async path."""
        self._check_mutable()
        self._conditions.append(as_condition(predicate, _SCOPES[apply_to], is_async=True))

    def apply_shared_condition(self, condition: Union[Condition, ConditionCheck]) -> None:
        """
        Guard every component with a condition evaluated at most once per run,
        however many rules share it.
        """
        self._check_mutable()
        self._conditions.append(as_condition(condition, ConditionScope.SHARED, is_async=False))

    def apply_shared_async_condition(self, condition: Union[Condition, ConditionCheck]) -> None:
        self._check_mutable()
        self._conditions.append(as_condition(condition, ConditionScope.SHARED, is_async=True))

    def add_dependent_rules(self, rules: Iterable["ValidationRule"]) -> None:
        """
        Attach rules that only run when this rule produced no failures. Allowed
        after sealing, the executor resolves dependents when it reaches them.

        :raises ValueError: If a rule would end up depending on itself, directly or indirectly.
        """
        for rule in rules:
            if rule is self or rule._reaches(self):
                raise ValueError(f"Dependent rule for '{rule.property_name}' would create a dependency cycle")
            self._dependent_rules.append(rule)

    def _reaches(self, target: "ValidationRule") -> bool:
        seen = set()
        pending = list(self._dependent_rules)
        while pending:
            rule = pending.pop()
            if rule is target:
                return True
            if id(rule) in seen:
                continue
            seen.add(id(rule))
            pending.extend(rule.dependent_rules)
        return False

    def seal(self) -> None:
        """Freeze the rule and its components. Idempotent."""
        if self._sealed:
            return
        for component in self._components:
            component.seal()
        self._sealed = True

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def validate(self, context: ValidationContext) -> bool:
        """
        Run the rule synchronously, appending failures to the context.

        :return: True if the rule produced no failures.
        :raises AsyncValidatorInvokedSynchronouslyError: If the rule needs the async path.
        """
        self.seal()
        if not self._components:
            return True
        self._ensure_sync_conditions()
        if not self._applies(context):
            logger.debug(f"Rule for '{self._property_name}' skipped by condition")
            return True

        display_name = self.get_display_name(context)
        value = self._member.get_value(context.instance_to_validate)
        failures = self._run_components(context, value, self._failure_name(display_name), display_name)
        return self._complete(context, failures)

    async def validate_async(self, context: ValidationContext) -> bool:
        """
        Run the rule on the async path, awaiting async conditions and predicates.

        :return: True if the rule produced no failures.
        """
        self.seal()
        if not self._components:
            return True
        if not await self._applies_async(context):
            logger.debug(f"Rule for '{self._property_name}' skipped by condition")
            return True

        display_name = self.get_display_name(context)
        value = self._member.get_value(context.instance_to_validate)
        failures = await self._run_components_async(context, value, self._failure_name(display_name), display_name)
        return await self._complete_async(context, failures)

    def _failure_name(self, display_name: Optional[str]) -> Optional[str]:
        return self._property_name if self._property_name is not None else display_name

    def _conditions_for(self, *scopes: ConditionScope) -> List[Condition]:
        return [c for c in self._conditions if c.scope in scopes]

    def _ensure_sync_conditions(self) -> None:
        if any(c.is_async for c in self._conditions):
            raise AsyncValidatorInvokedSynchronouslyError("Rule condition", self._property_name)

    def _applies(self, context: ValidationContext) -> bool:
        for condition in self._conditions_for(ConditionScope.RULE_ALL, ConditionScope.SHARED):
            if condition.scope is ConditionScope.SHARED:
                passed = condition.evaluate_shared(context)
            else:
                passed = condition.evaluate(context)
            if not passed:
                return False
        return True

    async def _applies_async(self, context: ValidationContext) -> bool:
        for condition in self._conditions_for(ConditionScope.RULE_ALL, ConditionScope.SHARED):
            if condition.scope is ConditionScope.SHARED:
                passed = await condition.evaluate_shared_async(context)
            else:
                passed = await condition.evaluate_async(context)
            if not passed:
                return False
        return True

    def _first_applies(self, context: ValidationContext) -> bool:
        return all(c.evaluate(context) for c in self._conditions_for(ConditionScope.RULE_FIRST_ONLY))

    async def _first_applies_async(self, context: ValidationContext) -> bool:
        for condition in self._conditions_for(ConditionScope.RULE_FIRST_ONLY):
            if not await condition.evaluate_async(context):
                return False
        return True

    def _run_components(
        self, context: ValidationContext, value: Any, property_name: Optional[str], display_name: Optional[str]
    ) -> List[ValidationFailure]:
        failures: List[ValidationFailure] = []
        for index, component in enumerate(self._components):
            if context.is_cancelled:
                logger.debug(f"Validation cancelled inside rule for '{property_name}'")
                break
            if index == 0 and not self._first_applies(context):
                continue
            ctx = PropertyContext(context, self, component, property_name, display_name, value)
            failure = component.evaluate(ctx)
            if failure is None:
                continue
            failures.append(failure)
            if self._cascade_mode is CascadeMode.STOP:
                break
        return failures

    async def _run_components_async(
        self, context: ValidationContext, value: Any, property_name: Optional[str], display_name: Optional[str]
    ) -> List[ValidationFailure]:
        failures: List[ValidationFailure] = []
        for index, component in enumerate(self._components):
            if context.is_cancelled:
                logger.debug(f"Validation cancelled inside rule for '{property_name}'")
                break
            if index == 0 and not await self._first_applies_async(context):
                continue
            ctx = PropertyContext(context, self, component, property_name, display_name, value)
            failure = await component.evaluate_async(ctx)
            if failure is None:
                continue
            failures.append(failure)
            if self._cascade_mode is CascadeMode.STOP:
                break
        return failures

    def _complete(self, context: ValidationContext, failures: List[ValidationFailure]) -> bool:
        if not failures:
            return True
        context.add_failures(failures)
        if self._on_failure is not None:
            result = self._on_failure(context.instance_to_validate, list(failures))
            if inspect.isawaitable(result):
                discard_awaitable(result)
                raise AsyncValidatorInvokedSynchronouslyError("Failure hook", self._property_name)
        return False

    async def _complete_async(self, context: ValidationContext, failures: List[ValidationFailure]) -> bool:
        if not failures:
            return True
        context.add_failures(failures)
        if self._on_failure is not None:
            await resolve(self._on_failure(context.instance_to_validate, list(failures)))
        return False

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._property_name!r}, components={len(self._components)})"
