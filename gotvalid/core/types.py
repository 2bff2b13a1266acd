"""
Type definitions and enums for the validation engine.

This module contains shared enums used across the engine. It has no runtime
dependencies on other modules so that components, rules and the executor can
all import from it without cycles.
"""

from enum import Enum, auto


class CascadeMode(Enum):
    """Controls whether a failing component stops the rest of its rule.

    Only components of the same rule are affected. Dependent rules are gated
    by whether the rule produced any failure at all.
    """
    CONTINUE = auto()  # Run every component regardless of earlier failures
    STOP = auto()      # Halt the rule at the first failing component


class ApplyConditionTo(Enum):
    """Scope of a rule-level condition applied through ValidationRule.apply_condition."""
    ALL_COMPONENTS = auto()   # Condition gates every component of the rule
    FIRST_COMPONENT = auto()  # Condition gates component #0 only


class ConditionScope(Enum):
    """Attachment point of a condition.

    The closed set of places a condition can be attached. The rule looks up
    its conditions by scope when deciding applicability.
    """
    COMPONENT = auto()        # Guards a single component
    RULE_FIRST_ONLY = auto()  # Guards the first component of a rule
    RULE_ALL = auto()         # Guards every component of a rule
    SHARED = auto()           # Guards every component, evaluated once per run


class Severity(Enum):
    """Severity attached to a validation failure."""
    ERROR = auto()
    WARNING = auto()
    INFO = auto()


class ExecutionMode(Enum):
    """Defines execution modes for the rule executor."""
    SYNCHRONOUS = auto()   # Execute in calling thread, no suspension
    ASYNCHRONOUS = auto()  # Await rules one after another
    PARALLEL = auto()      # Run independent top-level rules concurrently
