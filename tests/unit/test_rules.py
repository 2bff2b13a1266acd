# tests/unit/test_rules.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from unittest.mock import MagicMock

import pytest

from gotvalid.core.components import RuleComponent
from gotvalid.core.conditions import Condition
from gotvalid.core.errors import AsyncValidatorInvokedSynchronouslyError, RuleSealedError
from gotvalid.core.members import MemberDescriptor
from gotvalid.core.rules import ValidationRule
from gotvalid.core.types import ApplyConditionTo, CascadeMode, ConditionScope


def test_rule_init(member):
    rule = ValidationRule(member("age", int))
    assert rule.property_name == "age"
    assert rule.type_to_validate is int
    assert rule.cascade_mode is CascadeMode.CONTINUE
    assert rule.rule_sets == ()
    assert rule.components == ()
    assert rule.current is None
    assert rule.dependent_rules == []
    assert not rule.is_sealed


def test_rule_rejects_bad_arguments(member):
    with pytest.raises(ValueError):
        ValidationRule(None)
    with pytest.raises(ValueError):
        ValidationRule(member("age"), cascade_mode="stop")
    with pytest.raises(ValueError):
        ValidationRule(member("age"), rule_sets=[""])
    with pytest.raises(TypeError):
        ValidationRule(member("age")).add(lambda v, c: True)


def test_rule_sets_accept_single_name(member):
    assert ValidationRule(member("age"), rule_sets="Names").rule_sets == ("Names",)


def test_current_is_last_component(member, not_null, spy):
    rule = ValidationRule(member("age"))
    first = RuleComponent(not_null)
    second = RuleComponent(spy(True))
    rule.add(first)
    assert rule.current is first
    rule.add(second)
    assert rule.current is second
    assert rule.components == (first, second)


def test_display_name_resolution(member, context_factory):
    ctx = context_factory(object(), data={"label": "Years"})
    rule = ValidationRule(member("age"))
    assert rule.get_display_name(ctx) == "age"
    rule.set_display_name("Age")
    assert rule.get_display_name(ctx) == "Age"
    rule.set_display_name(lambda context: context.data["label"])
    assert rule.get_display_name(ctx) == "Years"


def test_empty_rule_passes_without_evaluating_anything(context_factory, person, spy):
    accessor = spy(None)
    condition = spy(True)
    rule = ValidationRule(MemberDescriptor.computed(accessor, "age"))
    rule.apply_condition(condition)
    ctx = context_factory(person)
    assert rule.validate(ctx) is True
    assert ctx.failures == []
    accessor.assert_not_called()
    condition.assert_not_called()


def test_cascade_stop_halts_at_first_failure(member, context_factory, person, spy):
    first = spy(False)
    second = spy(False)
    rule = ValidationRule(member("age"), cascade_mode=CascadeMode.STOP)
    rule.add(RuleComponent(first, name="first"))
    rule.add(RuleComponent(second, name="second"))

    ctx = context_factory(person)
    assert rule.validate(ctx) is False
    assert [f.error_code for f in ctx.failures] == ["first"]
    first.assert_called_once()
    second.assert_not_called()


def test_cascade_continue_runs_every_component(member, context_factory, person, spy):
    predicates = [spy(False), spy(True), spy(False)]
    rule = ValidationRule(member("age"))
    for index, predicate in enumerate(predicates):
        rule.add(RuleComponent(predicate, name=f"c{index}"))

    ctx = context_factory(person)
    assert rule.validate(ctx) is False
    assert [f.error_code for f in ctx.failures] == ["c0", "c2"]
    for predicate in predicates:
        predicate.assert_called_once()


def test_rule_condition_all_components(member, context_factory, person, spy):
    predicates = [spy(False), spy(False)]
    rule = ValidationRule(member("age"))
    for predicate in predicates:
        rule.add(RuleComponent(predicate))
    rule.apply_condition(lambda context: False)

    ctx = context_factory(person)
    assert rule.validate(ctx) is True
    assert ctx.failures == []
    for predicate in predicates:
        predicate.assert_not_called()


def test_rule_condition_first_component_only(member, context_factory, person, spy):
    first = spy(False)
    second = spy(False)
    rule = ValidationRule(member("age"))
    rule.add(RuleComponent(first, name="first"))
    rule.add(RuleComponent(second, name="second"))
    rule.apply_condition(lambda context: False, ApplyConditionTo.FIRST_COMPONENT)

    ctx = context_factory(person)
    assert rule.validate(ctx) is False
    first.assert_not_called()
    second.assert_called_once()
    assert [f.error_code for f in ctx.failures] == ["second"]


def test_first_only_condition_respects_component_condition(member, context_factory, person, spy):
    second = spy(False)
    rule = ValidationRule(member("age"))
    rule.add(RuleComponent(spy(False)))
    component = RuleComponent(second)
    component.apply_condition(lambda context: True)
    rule.add(component)
    rule.apply_condition(lambda context: False, ApplyConditionTo.FIRST_COMPONENT)

    ctx = context_factory(person)
    rule.validate(ctx)
    second.assert_called_once()


def test_shared_condition_skips_rule(member, context_factory, person, spy):
    predicate = spy(False)
    rule = ValidationRule(member("age"))
    rule.add(RuleComponent(predicate))
    rule.apply_shared_condition(lambda context: False)
    assert rule.conditions[0].scope is ConditionScope.SHARED

    ctx = context_factory(person)
    assert rule.validate(ctx) is True
    predicate.assert_not_called()


def test_shared_condition_evaluated_once_across_rules(member, context_factory, person, spy):
    shared = Condition(spy(True))
    rules = []
    for name in ("name", "age"):
        rule = ValidationRule(member(name))
        rule.add(RuleComponent(spy(True)))
        rule.apply_shared_condition(shared)
        rules.append(rule)

    ctx = context_factory(person)
    for rule in rules:
        rule.validate(ctx)
    assert shared.predicate.call_count == 1


def test_condition_flags(member, not_null):
    rule = ValidationRule(member("age"))
    assert not rule.has_condition
    assert not rule.has_async_condition
    rule.apply_condition(lambda context: True)
    assert rule.has_condition

    async def async_condition(context):
        return True

    other = ValidationRule(member("age"))
    component = RuleComponent(not_null)
    component.apply_async_condition(async_condition)
    other.add(component)
    assert other.has_async_condition


def test_async_rule_condition_fails_fast_on_sync_path(member, context_factory, person, spy):
    async def condition(context):
        return True

    predicate = spy(True)
    rule = ValidationRule(member("age"))
    rule.add(RuleComponent(predicate))
    rule.apply_async_condition(condition)
    with pytest.raises(AsyncValidatorInvokedSynchronouslyError):
        rule.validate(context_factory(person))
    predicate.assert_not_called()


def test_on_failure_hook(member, context_factory, person, spy):
    hook = MagicMock()
    rule = ValidationRule(member("age"))
    rule.add(RuleComponent(spy(False), name="a"))
    rule.add(RuleComponent(spy(False), name="b"))
    rule.on_failure = hook

    ctx = context_factory(person)
    rule.validate(ctx)
    hook.assert_called_once()
    instance, failures = hook.call_args[0]
    assert instance is person
    assert [f.error_code for f in failures] == ["a", "b"]


def test_on_failure_hook_not_called_on_success(member, context_factory, person, spy):
    hook = MagicMock()
    rule = ValidationRule(member("age"))
    rule.add(RuleComponent(spy(True)))
    rule.on_failure = hook
    rule.validate(context_factory(person))
    hook.assert_not_called()


def test_property_name_override_and_anonymous_member(context_factory, person, spy):
    rule = ValidationRule(MemberDescriptor.computed(lambda p: p.age), display_name="Computed")
    rule.add(RuleComponent(spy(False)))
    ctx = context_factory(person)
    rule.validate(ctx)
    assert ctx.failures[0].property_name == "Computed"

    rule = ValidationRule(MemberDescriptor.attribute("age"), property_name="years")
    rule.add(RuleComponent(spy(False)))
    ctx = context_factory(person)
    rule.validate(ctx)
    assert ctx.failures[0].property_name == "years"


def test_accessor_fault_propagates(context_factory, person, not_null):
    rule = ValidationRule(MemberDescriptor.attribute("missing"))
    rule.add(RuleComponent(not_null))
    with pytest.raises(AttributeError):
        rule.validate(context_factory(person))


def test_seal_on_first_execution(member, context_factory, person, not_null):
    rule = ValidationRule(member("age"))
    component = RuleComponent(not_null)
    rule.add(component)
    rule.validate(context_factory(person))
    assert rule.is_sealed
    assert component.is_sealed
    with pytest.raises(RuleSealedError):
        rule.add(RuleComponent(not_null))
    with pytest.raises(RuleSealedError):
        rule.cascade_mode = CascadeMode.STOP
    with pytest.raises(RuleSealedError):
        rule.apply_condition(lambda context: True)
    with pytest.raises(RuleSealedError):
        rule.set_display_name("Age")


def test_dependents_attachable_after_seal(member, not_null):
    rule = ValidationRule(member("age"))
    rule.seal()
    dependent = ValidationRule(member("name"))
    rule.add_dependent_rules([dependent])
    assert rule.dependent_rules == [dependent]
    with pytest.raises(ValueError):
        rule.add_dependent_rules([rule])


def test_indirect_dependency_cycle_rejected(member):
    first = ValidationRule(member("name"))
    second = ValidationRule(member("age"))
    third = ValidationRule(member("email"))
    first.add_dependent_rules([second])
    second.add_dependent_rules([third])
    with pytest.raises(ValueError, match="cycle"):
        third.add_dependent_rules([first])
    with pytest.raises(ValueError, match="cycle"):
        second.add_dependent_rules([first])
    assert third.dependent_rules == []
    assert second.dependent_rules == [third]


def test_shared_dependent_is_not_a_cycle(member):
    shared = ValidationRule(member("email"))
    first = ValidationRule(member("name"))
    second = ValidationRule(member("age"))
    first.add_dependent_rules([second, shared])
    second.add_dependent_rules([shared])
    assert second.dependent_rules == [shared]


def test_cancellation_stops_components(member, context_factory, person, spy):
    from gotvalid.core.cancellation import CancellationToken

    token = CancellationToken()
    second = spy(False)

    def cancelling(value, context):
        token.cancel()
        return False

    rule = ValidationRule(member("age"))
    rule.add(RuleComponent(cancelling, name="first"))
    rule.add(RuleComponent(second, name="second"))

    ctx = context_factory(person, cancellation=token)
    assert rule.validate(ctx) is False
    assert [f.error_code for f in ctx.failures] == ["first"]
    second.assert_not_called()


@pytest.mark.asyncio
async def test_validate_async_mixed_components(member, context_factory, person):
    calls = []

    async def async_check(value, context):
        calls.append("async")
        return False

    def sync_check(value, context):
        calls.append("sync")
        return False

    rule = ValidationRule(member("age"))
    rule.add(RuleComponent(async_check, name="async_check"))
    rule.add(RuleComponent(sync_check, name="sync_check"))

    ctx = context_factory(person)
    assert await rule.validate_async(ctx) is False
    assert calls == ["async", "sync"]
    assert [f.error_code for f in ctx.failures] == ["async_check", "sync_check"]


@pytest.mark.asyncio
async def test_validate_async_conditions(member, context_factory, person, spy):
    async def no(context):
        return False

    first = spy(False)
    second = spy(False)
    rule = ValidationRule(member("age"))
    rule.add(RuleComponent(first))
    rule.add(RuleComponent(second))
    rule.apply_async_condition(no, ApplyConditionTo.FIRST_COMPONENT)

    ctx = context_factory(person)
    await rule.validate_async(ctx)
    first.assert_not_called()
    second.assert_called_once()

    rule = ValidationRule(member("age"))
    rule.add(RuleComponent(first))
    rule.apply_shared_async_condition(no)
    assert await rule.validate_async(context_factory(person)) is True


@pytest.mark.asyncio
async def test_async_on_failure_hook_awaited(member, context_factory, person, spy):
    seen = []

    async def hook(instance, failures):
        seen.extend(failures)

    rule = ValidationRule(member("age"))
    rule.add(RuleComponent(spy(False)))
    rule.on_failure = hook
    await rule.validate_async(context_factory(person))
    assert len(seen) == 1


def test_async_on_failure_hook_on_sync_path_fails_fast(member, context_factory, person, spy):
    async def hook(instance, failures):
        pass

    rule = ValidationRule(member("age"))
    rule.add(RuleComponent(spy(False)))
    rule.on_failure = hook
    with pytest.raises(AsyncValidatorInvokedSynchronouslyError):
        rule.validate(context_factory(person))
