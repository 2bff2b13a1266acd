"""
Rule execution over a validation context.

Architecture:
- Walks rules in declaration order against one ValidationContext
- Filters rules by the context's rule-set selector
- Runs dependent rules depth-first after a passing parent
- Supports synchronous, asynchronous and parallel scheduling

Responsibilities:
1. Rule selection
   - Rule-set filtering, unknown names select nothing
   - Dependents inherit their parent's selection
2. Sequencing
   - Declaration order for top-level rules
   - Dependents skipped entirely after a failing parent
3. Concurrency
   - Parallel branches write into private failure buffers
   - Buffers merged in declaration order
4. Cancellation
   - Checked between rules, failures so far are returned

Faults raised by conditions, predicates or factories propagate unmodified.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, List

from gotvalid.core.types import ExecutionMode
from gotvalid.interfaces.protocols import ExecutableRule, RuleList
from gotvalid.runtime.async_support import gather_in_order

if TYPE_CHECKING:
    from gotvalid.core.context import ValidationContext
    from gotvalid.core.failures import ValidationFailure
    from gotvalid.core.selectors import RuleSetSelector

logger = logging.getLogger(__name__)


class RuleExecutor:
    """
    Runs a set of rules against a validation context and accumulates failures.

    The executor holds no per-run state; one instance may serve many
    concurrent runs as long as the rules themselves are not modified.
    """

    def __init__(self, mode: ExecutionMode = ExecutionMode.ASYNCHRONOUS) -> None:
        """
        :param mode: Scheduling used by run_async. ASYNCHRONOUS awaits top-level
                     rules one after another, PARALLEL runs them concurrently.
                     The synchronous entry point is always run().
        """
        if not isinstance(mode, ExecutionMode):
            raise ValueError("Execution mode must be an ExecutionMode enum value")
        self._mode = mode

    @property
    def mode(self) -> ExecutionMode:
        return self._mode

    @staticmethod
    def select(rules: Iterable[ExecutableRule], selector: "RuleSetSelector") -> RuleList:
        """
        Return the rules the selector allows, preserving declaration order.
        """
        selected = []
        for rule in rules:
            if selector.can_execute(rule):
                selected.append(rule)
            else:
                logger.debug(f"Skipping {rule!r}, not in rule sets {list(selector.rule_sets)}")
        return selected

    def run(self, rules: Iterable[ExecutableRule], context: "ValidationContext") -> List["ValidationFailure"]:
        """
        Run the rules synchronously.

        :param rules: Rules in declaration order.
        :param context: Fresh context for this run.
        :return: The ordered failures collected in the context.
        :raises AsyncValidatorInvokedSynchronouslyError: If a reached rule needs the async path.
        """
        context.execution_mode = ExecutionMode.SYNCHRONOUS
        for rule in self.select(rules, context.selector):
            if context.is_cancelled:
                logger.debug("Validation cancelled, remaining rules skipped")
                break
            self._execute(rule, context)
        failures = context.failures
        logger.debug(f"Synchronous run finished with {len(failures)} failure(s)")
        return failures

    async def run_async(self, rules: Iterable[ExecutableRule], context: "ValidationContext") -> List["ValidationFailure"]:
        """
        Run the rules on the async path using this executor's mode.

        :param rules: Rules in declaration order.
        :param context: Fresh context for this run.
        :return: The ordered failures collected in the context.
        """
        selected = self.select(rules, context.selector)
        if self._mode is ExecutionMode.PARALLEL:
            context.execution_mode = ExecutionMode.PARALLEL
            await self._run_parallel(selected, context)
        else:
            context.execution_mode = ExecutionMode.ASYNCHRONOUS
            for rule in selected:
                if context.is_cancelled:
                    logger.debug("Validation cancelled, remaining rules skipped")
                    break
                await self._execute_async(rule, context)
        failures = context.failures
        logger.debug(f"Async run finished with {len(failures)} failure(s)")
        return failures

    async def _run_parallel(self, rules: List[ExecutableRule], context: "ValidationContext") -> None:
        branches = [context.fork() for _ in rules]
        await gather_in_order(self._execute_async(rule, branch) for rule, branch in zip(rules, branches))
        for branch in branches:
            context.add_failures(branch.failures)

    def _execute(self, rule: ExecutableRule, context: "ValidationContext") -> bool:
        passed = rule.validate(context)
        if not passed:
            if rule.dependent_rules:
                logger.debug(f"{rule!r} failed, skipping {len(rule.dependent_rules)} dependent rule(s)")
            return False
        for dependent in list(rule.dependent_rules):
            if context.is_cancelled:
                break
            self._execute(dependent, context)
        return True

    async def _execute_async(self, rule: ExecutableRule, context: "ValidationContext") -> bool:
        if context.is_cancelled:
            return True
        passed = await rule.validate_async(context)
        if not passed:
            if rule.dependent_rules:
                logger.debug(f"{rule!r} failed, skipping {len(rule.dependent_rules)} dependent rule(s)")
            return False
        for dependent in list(rule.dependent_rules):
            if context.is_cancelled:
                break
            await self._execute_async(dependent, context)
        return True
