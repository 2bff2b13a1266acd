"""
Core package providing the rule execution model.

Architecture:
- Rule components wrap one predicate with its own conditions and factories
- Validation rules order components and decide applicability and cascade
- Collection rules expand a rule over the elements of an enumerable member
- The validation context carries the per-run state shared by all of them
"""

# Import order matters to avoid circular dependencies
from .errors import (
    GotValidError,
    ConfigurationError,
    AsyncValidatorInvokedSynchronouslyError,
    RuleSealedError,
    ValidationError,
)
from .types import ApplyConditionTo, CascadeMode, ConditionScope, ExecutionMode, Severity
from .failures import ValidationFailure
from .members import MemberDescriptor
from .selectors import DEFAULT_RULE_SET, WILDCARD_RULE_SET, RuleSetSelector
from .cancellation import CancellationToken
from .context import PropertyContext, ValidationContext
from .conditions import Condition
from .components import RuleComponent
from .rules import ValidationRule
from .collection_rules import CollectionRule, default_index_builder

__all__ = [
    # Errors
    "GotValidError",
    "ConfigurationError",
    "AsyncValidatorInvokedSynchronouslyError",
    "RuleSealedError",
    "ValidationError",
    # Enums
    "ApplyConditionTo",
    "CascadeMode",
    "ConditionScope",
    "ExecutionMode",
    "Severity",
    # Data
    "ValidationFailure",
    "MemberDescriptor",
    "RuleSetSelector",
    "DEFAULT_RULE_SET",
    "WILDCARD_RULE_SET",
    "CancellationToken",
    "ValidationContext",
    "PropertyContext",
    # Rules
    "Condition",
    "RuleComponent",
    "ValidationRule",
    "CollectionRule",
    "default_index_builder",
]
