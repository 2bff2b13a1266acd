# gotvalid/core/context.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

from gotvalid.core.failures import ValidationFailure
from gotvalid.core.selectors import RuleSetSelector
from gotvalid.core.types import ExecutionMode
from gotvalid.core.cancellation import CancellationToken

if TYPE_CHECKING:
    from gotvalid.core.components import RuleComponent
    from gotvalid.core.rules import ValidationRule


class ValidationContext:
    """
    Per-run state of a validation: the value under validation, the failures
    collected so far, ambient data shared between conditions and components,
    the active rule-set selector and the cancellation signal.

    A context is created once per top-level validate call and discarded
    afterwards. It is never shared between runs.
    """

    def __init__(
        self,
        instance_to_validate: Any,
        selector: Optional[RuleSetSelector] = None,
        data: Optional[Dict[str, Any]] = None,
        cancellation: Optional[CancellationToken] = None,
    ) -> None:
        """
        :param instance_to_validate: The root value being validated.
        :param selector: Rule-set selector, defaults to the default rule set.
        :param data: Ambient key/value state for conditions and components.
        :param cancellation: Optional cancellation token, a fresh one per context if None.
        """
        self._instance = instance_to_validate
        self._selector = selector or RuleSetSelector()
        self._data: Dict[str, Any] = data if data is not None else {}
        self._cancellation = cancellation if cancellation is not None else CancellationToken()
        self._failures: List[ValidationFailure] = []
        self._shared_conditions: Dict[Any, Any] = {}
        self.execution_mode = ExecutionMode.SYNCHRONOUS

    @property
    def instance_to_validate(self) -> Any:
        """The root value under validation."""
        return self._instance

    @property
    def failures(self) -> List[ValidationFailure]:
        """A snapshot of the failures collected so far, in order."""
        return list(self._failures)

    @property
    def data(self) -> Dict[str, Any]:
        """Ambient state shared by every condition and component in this run."""
        return self._data

    @property
    def selector(self) -> RuleSetSelector:
        return self._selector

    @property
    def cancellation(self) -> CancellationToken:
        return self._cancellation

    @property
    def is_cancelled(self) -> bool:
        return self._cancellation.is_cancelled

    @property
    def is_async(self) -> bool:
        return self.execution_mode is not ExecutionMode.SYNCHRONOUS

    @property
    def shared_conditions(self) -> Dict[Any, Any]:
        """Cache of shared condition results for this run, keyed by condition."""
        return self._shared_conditions

    def add_failure(self, failure: ValidationFailure) -> None:
        self._failures.append(failure)

    def add_failures(self, failures: Iterable[ValidationFailure]) -> None:
        self._failures.extend(failures)

    def fork(self) -> "ValidationContext":
        """
        Create a branch context with a private failure buffer. Everything else,
        including ambient data and the shared condition cache, is shared with
        this context.
        """
        branch = ValidationContext(self._instance, self._selector, self._data, self._cancellation)
        branch._shared_conditions = self._shared_conditions
        branch.execution_mode = self.execution_mode
        return branch


@dataclass(frozen=True)
class PropertyContext:
    """
    Immutable view of one component invocation, handed to message factories,
    state factories and rule message builders.
    """

    validation_context: ValidationContext
    rule: "ValidationRule"
    component: "RuleComponent"
    property_name: Optional[str]
    display_name: Optional[str]
    property_value: Any
    message: Optional[str] = None

    @property
    def instance(self) -> Any:
        """The root value under validation."""
        return self.validation_context.instance_to_validate
