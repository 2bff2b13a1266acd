# gotvalid/validator.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Union

from gotvalid.builder import RuleBuilder
from gotvalid.core.cancellation import CancellationToken
from gotvalid.core.collection_rules import CollectionRule
from gotvalid.core.context import ValidationContext
from gotvalid.core.errors import ValidationError
from gotvalid.core.failures import ValidationFailure
from gotvalid.core.members import MemberDescriptor
from gotvalid.core.rules import ValidationRule
from gotvalid.core.selectors import RuleSetSelector
from gotvalid.core.types import ExecutionMode
from gotvalid.options import ValidatorOptions
from gotvalid.runtime.executor import RuleExecutor

logger = logging.getLogger(__name__)

MemberSpec = Union[str, MemberDescriptor, Callable[[Any], Any]]


@dataclass
class ValidationResult:
    """
    Outcome of one validation run.

    :param failures: Failures in rule declaration order.
    :param rule_sets_executed: Rule-set names that were requested.
    """

    failures: List[ValidationFailure] = field(default_factory=list)
    rule_sets_executed: Tuple[str, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.failures

    def to_dict(self) -> Dict[str, List[str]]:
        """Group failure messages by property name."""
        grouped: Dict[str, List[str]] = {}
        for failure in self.failures:
            grouped.setdefault(failure.property_name or "", []).append(failure.error_message)
        return grouped

    def to_string(self, separator: str = "\n") -> str:
        return separator.join(f.error_message for f in self.failures)

    def __str__(self) -> str:
        return self.to_string()


def _split_rule_sets(names: Union[str, Iterable[str], None]) -> Tuple[str, ...]:
    if names is None:
        return ()
    if isinstance(names, str):
        return tuple(n.strip() for n in names.split(",") if n.strip())
    return tuple(names)


class Validator:
    """
    Owns the rules declared for one kind of value and runs them.

    Rules are created through rule_for and rule_for_each, or added directly.
    Each validate call builds a fresh ValidationContext and hands it to a
    RuleExecutor together with every rule, in declaration order.

    A Validator may be shared between concurrent runs once its rules are
    configured; modifying rules while a run is in flight is not supported.
    """

    def __init__(self, options: Optional[ValidatorOptions] = None) -> None:
        """
        :param options: Configuration applied to new rules and runs.
        """
        self._options = options or ValidatorOptions()
        self._rules: List[ValidationRule] = []
        self._active_rule_sets: Tuple[str, ...] = ()

    @property
    def options(self) -> ValidatorOptions:
        return self._options

    @property
    def rules(self) -> Tuple[ValidationRule, ...]:
        return tuple(self._rules)

    def add_rule(self, rule: ValidationRule) -> ValidationRule:
        """
        Register a rule. Inside a rule_set block untagged rules are tagged
        with the block's names.
        """
        if not isinstance(rule, ValidationRule):
            raise TypeError("Only ValidationRule instances can be added")
        if self._active_rule_sets and not rule.rule_sets:
            rule.rule_sets = self._active_rule_sets
        self._rules.append(rule)
        return rule

    @staticmethod
    def _member(member: MemberSpec, declared_type: type) -> MemberDescriptor:
        if isinstance(member, MemberDescriptor):
            return member
        if isinstance(member, str):
            return MemberDescriptor.attribute(member, declared_type)
        if callable(member):
            return MemberDescriptor.computed(member, declared_type=declared_type)
        raise TypeError("Member must be an attribute name, a MemberDescriptor or a callable")

    def rule_for(self, member: MemberSpec, declared_type: type = object) -> RuleBuilder:
        """
        Declare a rule for a member.

        :param member: Attribute name, MemberDescriptor, or accessor callable.
        :param declared_type: Declared type of the member.
        """
        rule = ValidationRule(self._member(member, declared_type), cascade_mode=self._options.cascade_mode)
        self.add_rule(rule)
        return RuleBuilder(rule, self._options)

    def rule_for_each(self, member: MemberSpec, declared_type: type = object) -> RuleBuilder:
        """Declare a rule applied to every element of a collection member."""
        rule = CollectionRule(
            self._member(member, declared_type),
            index_builder=self._options.index_builder,
            cascade_mode=self._options.cascade_mode,
        )
        self.add_rule(rule)
        return RuleBuilder(rule, self._options)

    def rule_set(self, names: Union[str, Iterable[str]], configure: Callable[["Validator"], Any]) -> None:
        """
        Tag every rule declared inside ``configure`` with the given rule sets.
        Names may be given as a comma separated string.
        """
        previous = self._active_rule_sets
        self._active_rule_sets = _split_rule_sets(names)
        try:
            configure(self)
        finally:
            self._active_rule_sets = previous

    def _create_context(
        self,
        instance: Any,
        rule_sets: Union[str, Iterable[str], None],
        data: Optional[Dict[str, Any]],
        cancellation: Optional[CancellationToken],
    ) -> ValidationContext:
        selector = RuleSetSelector(_split_rule_sets(rule_sets))
        return ValidationContext(instance, selector=selector, data=data, cancellation=cancellation)

    def validate(
        self,
        instance: Any,
        rule_sets: Union[str, Iterable[str], None] = None,
        data: Optional[Dict[str, Any]] = None,
        cancellation: Optional[CancellationToken] = None,
    ) -> ValidationResult:
        """
        Validate synchronously.

        :param instance: The value to validate.
        :param rule_sets: Rule sets to run, the default set if None.
        :param data: Ambient state visible to conditions and components.
        :param cancellation: Optional cancellation token.
        :raises AsyncValidatorInvokedSynchronouslyError: If a reached rule needs the async path.
        """
        context = self._create_context(instance, rule_sets, data, cancellation)
        logger.debug(f"Validating {type(instance).__name__} with {len(self._rules)} rule(s)")
        failures = RuleExecutor(ExecutionMode.SYNCHRONOUS).run(self._rules, context)
        return ValidationResult(failures, context.selector.rule_sets)

    async def validate_async(
        self,
        instance: Any,
        rule_sets: Union[str, Iterable[str], None] = None,
        data: Optional[Dict[str, Any]] = None,
        cancellation: Optional[CancellationToken] = None,
        parallel: Optional[bool] = None,
    ) -> ValidationResult:
        """
        Validate on the async path.

        :param parallel: Run top-level rules concurrently, defaults to the options.
        """
        if parallel is None:
            parallel = self._options.parallel
        context = self._create_context(instance, rule_sets, data, cancellation)
        logger.debug(f"Validating {type(instance).__name__} asynchronously with {len(self._rules)} rule(s)")
        executor = RuleExecutor(ExecutionMode.PARALLEL if parallel else ExecutionMode.ASYNCHRONOUS)
        failures = await executor.run_async(self._rules, context)
        return ValidationResult(failures, context.selector.rule_sets)

    def validate_and_raise(self, instance: Any, rule_sets: Union[str, Iterable[str], None] = None, **kwargs: Any) -> ValidationResult:
        """
        Validate synchronously and raise ValidationError if any failure was produced.
        """
        result = self.validate(instance, rule_sets, **kwargs)
        if not result.is_valid:
            raise ValidationError(result.failures)
        return result

    async def validate_and_raise_async(
        self, instance: Any, rule_sets: Union[str, Iterable[str], None] = None, **kwargs: Any
    ) -> ValidationResult:
        result = await self.validate_async(instance, rule_sets, **kwargs)
        if not result.is_valid:
            raise ValidationError(result.failures)
        return result
