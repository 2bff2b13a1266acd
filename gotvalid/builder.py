# gotvalid/builder.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Optional, Union

from gotvalid.core.collection_rules import CollectionRule
from gotvalid.core.components import RuleComponent
from gotvalid.core.conditions import Condition
from gotvalid.core.errors import ConfigurationError
from gotvalid.core.rules import ValidationRule
from gotvalid.core.types import ApplyConditionTo, CascadeMode, Severity
from gotvalid.interfaces.types import (
    ConditionCheck,
    DisplayNameFactory,
    ElementFilter,
    FailureHook,
    IndexBuilder,
    MessageFactory,
    Predicate,
    StateFactory,
)
from gotvalid.runtime.async_support import is_async_callable

if TYPE_CHECKING:
    from gotvalid.options import ValidatorOptions
    from gotvalid.validator import Validator


def _negate(predicate: Union[Condition, ConditionCheck]) -> Condition:
    if not isinstance(predicate, Condition):
        predicate = Condition(predicate)
    return ~predicate


class RuleBuilder:
    """
    Minimal chained configuration of one rule. Every call goes through the
    rule itself, so once the rule is sealed further calls raise RuleSealedError.

    Component-level settings (message, error code, severity, state, component
    conditions) apply to the most recently added component.
    """

    def __init__(self, rule: ValidationRule, options: Optional["ValidatorOptions"] = None) -> None:
        self._rule = rule
        self._options = options

    @property
    def rule(self) -> ValidationRule:
        return self._rule

    def _current(self, setting: str) -> RuleComponent:
        component = self._rule.current
        if component is None:
            raise ConfigurationError(f"{setting} requires a validator to be added first")
        return component

    def _collection(self, setting: str) -> CollectionRule:
        if not isinstance(self._rule, CollectionRule):
            raise ConfigurationError(f"{setting} is only available on collection rules")
        return self._rule

    def must(
        self, predicate: Predicate, name: Optional[str] = None, message: Optional[str] = None
    ) -> "RuleBuilder":
        """Add a validator. The predicate takes (value, context) and returns True when valid."""
        self._rule.add(RuleComponent(predicate, name=name, error_message=message))
        return self

    def must_async(
        self, predicate: Predicate, name: Optional[str] = None, message: Optional[str] = None
    ) -> "RuleBuilder":
        """Add a validator that only runs on the async path."""
        self._rule.add(RuleComponent(predicate, name=name, is_async=True, error_message=message))
        return self

    def with_message(self, message: str) -> "RuleBuilder":
        self._current("with_message").set_error_message(message)
        return self

    def with_message_factory(self, factory: MessageFactory) -> "RuleBuilder":
        self._current("with_message_factory").set_message_factory(factory)
        return self

    def with_error_code(self, error_code: str) -> "RuleBuilder":
        self._current("with_error_code").set_error_code(error_code)
        return self

    def with_severity(self, severity: Severity) -> "RuleBuilder":
        self._current("with_severity").set_severity(severity)
        return self

    def with_state(self, factory: StateFactory) -> "RuleBuilder":
        self._current("with_state").set_state_factory(factory)
        return self

    def when(
        self,
        predicate: Union[Condition, ConditionCheck],
        apply_to: ApplyConditionTo = ApplyConditionTo.ALL_COMPONENTS,
    ) -> "RuleBuilder":
        """Only apply the rule (or its first validator) when the predicate holds."""
        self._rule.apply_condition(predicate, apply_to)
        return self

    def unless(
        self,
        predicate: Union[Condition, ConditionCheck],
        apply_to: ApplyConditionTo = ApplyConditionTo.ALL_COMPONENTS,
    ) -> "RuleBuilder":
        """Skip the rule (or its first validator) when the predicate holds. Async predicates are awaited."""
        negated = _negate(predicate)
        if negated.is_async:
            self._rule.apply_async_condition(negated, apply_to)
        else:
            self._rule.apply_condition(negated, apply_to)
        return self

    def when_async(
        self,
        predicate: Union[Condition, ConditionCheck],
        apply_to: ApplyConditionTo = ApplyConditionTo.ALL_COMPONENTS,
    ) -> "RuleBuilder":
        self._rule.apply_async_condition(predicate, apply_to)
        return self

    def when_shared(self, condition: Union[Condition, ConditionCheck]) -> "RuleBuilder":
        """Apply a condition evaluated once per run across every rule that shares it."""
        is_async = condition.is_async if isinstance(condition, Condition) else is_async_callable(condition)
        if is_async:
            self._rule.apply_shared_async_condition(condition)
        else:
            self._rule.apply_shared_condition(condition)
        return self

    def component_when(self, predicate: Union[Condition, ConditionCheck]) -> "RuleBuilder":
        """Guard only the most recently added validator."""
        self._current("component_when").apply_condition(predicate)
        return self

    def component_when_async(self, predicate: Union[Condition, ConditionCheck]) -> "RuleBuilder":
        self._current("component_when_async").apply_async_condition(predicate)
        return self

    def cascade(self, mode: CascadeMode) -> "RuleBuilder":
        self._rule.cascade_mode = mode
        return self

    def in_rule_sets(self, *names: str) -> "RuleBuilder":
        self._rule.rule_sets = names
        return self

    def with_name(self, name: Union[str, DisplayNameFactory]) -> "RuleBuilder":
        """Set the display name, statically or as a factory of the context."""
        self._rule.set_display_name(name)
        return self

    def override_property_name(self, name: str) -> "RuleBuilder":
        self._rule.property_name = name
        return self

    def on_failure(self, hook: FailureHook) -> "RuleBuilder":
        self._rule.on_failure = hook
        return self

    def with_message_builder(self, builder: MessageFactory) -> "RuleBuilder":
        self._rule.message_builder = builder
        return self

    def where(self, predicate: ElementFilter) -> "RuleBuilder":
        """Only validate collection elements accepted by the predicate."""
        self._collection("where").filter = predicate
        return self

    def override_index(self, builder: IndexBuilder) -> "RuleBuilder":
        self._collection("override_index").index_builder = builder
        return self

    def concurrently(self, enabled: bool = True) -> "RuleBuilder":
        """Validate collection elements concurrently on the async path."""
        self._collection("concurrently").concurrent = enabled
        return self

    def dependent_rules(self, configure: Callable[["Validator"], Any]) -> "RuleBuilder":
        """
        Declare rules that only run when this rule passed. ``configure``
        receives a scratch validator; every rule it declares becomes a
        dependent of this rule and inherits this rule's rule sets.
        """
        from gotvalid.validator import Validator

        scratch = Validator(self._options)
        configure(scratch)
        for dependent in scratch.rules:
            if not dependent.rule_sets:
                dependent.rule_sets = self._rule.rule_sets
        self._rule.add_dependent_rules(scratch.rules)
        return self

    def build(self) -> ValidationRule:
        """Seal the rule and return it."""
        self._rule.seal()
        return self._rule
