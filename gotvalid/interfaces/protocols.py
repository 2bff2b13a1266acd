# gotvalid/interfaces/protocols.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
from typing import Any, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

from gotvalid.interfaces.types import RuleSetName


@runtime_checkable
class MemberAccessor(Protocol):
    """
    Member protocol supplied by a rule authoring front end.

    Attributes:
        name: The member name used for default display and property names, may be None.
        declared_type: The declared type of the member.

    Methods:
        get_value(instance): Returns the member's value from the root instance.

    Runtime Invariants:
    - The accessor never mutates the instance.
    """

    name: Optional[str]
    declared_type: type

    def get_value(self, instance: Any) -> Any:
        """Read the member value from the instance under validation."""
        ...


@runtime_checkable
class ExecutableRule(Protocol):
    """
    Rule protocol consumed by the rule executor.

    Methods:
        validate(context): Runs the rule synchronously, returns True if it produced no failures.
        validate_async(context): Async counterpart of validate.
        seal(): Freezes the rule's component list before first execution.

    Runtime Invariants:
    - A rule appends failures to the context and never removes any.
    - Dependent rules are only resolved when the executor reaches them.

    Error Handling:
    - Faults raised by user callables propagate unmodified to the executor's caller.
    """

    @property
    def rule_sets(self) -> Tuple[RuleSetName, ...]:
        """Rule-set tags of this rule, empty for the default set."""
        ...

    @property
    def dependent_rules(self) -> Sequence["ExecutableRule"]:
        """Rules that only run when this rule produced no failures."""
        ...

    def seal(self) -> None:
        """Freeze the rule for execution."""
        ...

    def validate(self, context: Any) -> bool:
        """Run the rule and report whether it passed."""
        ...

    async def validate_async(self, context: Any) -> bool:
        """Run the rule asynchronously and report whether it passed."""
        ...


RuleList = List[ExecutableRule]
