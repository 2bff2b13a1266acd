"""gotvalid: rule-based object validation engine

This package evaluates declaratively composed rules against a value and
collects ordered validation failures.

Responsibilities:
    - Rule execution, synchronous and asynchronous
    - Cascade policies within a rule
    - Rule, component and shared conditions
    - Dependent rules gated on their parent passing
    - Collection rules with element-indexed property names
    - Rule-set selection

Cross-cutting Concerns:
    Thread Safety:
        - No global mutable state, all run state lives in the context
        - Rules are read-only once sealed

    Error Handling:
        - Configuration errors fail fast
        - Faults from user callables propagate unmodified

    Logging:
        - Standard library logging, debug level only
"""

from gotvalid.core import (
    ApplyConditionTo,
    AsyncValidatorInvokedSynchronouslyError,
    CancellationToken,
    CascadeMode,
    CollectionRule,
    Condition,
    ConfigurationError,
    GotValidError,
    MemberDescriptor,
    PropertyContext,
    RuleComponent,
    RuleSealedError,
    RuleSetSelector,
    Severity,
    ValidationContext,
    ValidationError,
    ValidationFailure,
    ValidationRule,
)
from gotvalid.runtime import RuleExecutor
from gotvalid.builder import RuleBuilder
from gotvalid.options import ValidatorOptions
from gotvalid.validator import ValidationResult, Validator

__version__ = "0.1.0"

__all__ = [
    "ApplyConditionTo",
    "AsyncValidatorInvokedSynchronouslyError",
    "CancellationToken",
    "CascadeMode",
    "CollectionRule",
    "Condition",
    "ConfigurationError",
    "GotValidError",
    "MemberDescriptor",
    "PropertyContext",
    "RuleBuilder",
    "RuleComponent",
    "RuleExecutor",
    "RuleSealedError",
    "RuleSetSelector",
    "Severity",
    "ValidationContext",
    "ValidationError",
    "ValidationFailure",
    "ValidationResult",
    "ValidationRule",
    "Validator",
    "ValidatorOptions",
]
