# gotvalid/core/errors.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from gotvalid.core.failures import ValidationFailure


class GotValidError(Exception):
    """
    Base exception class for errors raised by the validation engine itself.
    """


class ConfigurationError(GotValidError):
    """
    Raised when a rule graph is configured in a way that cannot be executed.
    """


class AsyncValidatorInvokedSynchronouslyError(ConfigurationError):
    """
    Raised when an async-only condition or predicate is reached from the
    synchronous execution path.
    """

    def __init__(self, what: str, property_name: Optional[str] = None) -> None:
        target = f" on '{property_name}'" if property_name else ""
        super().__init__(
            f"{what}{target} is asynchronous and cannot be invoked synchronously. "
            "Use validate_async instead."
        )
        self.property_name = property_name


class RuleSealedError(ConfigurationError):
    """
    Raised when a rule or component is modified after it has been sealed for execution.
    """


class ValidationError(GotValidError):
    """
    Raised by Validator.validate_and_raise when validation produced failures.
    """

    def __init__(self, failures: List["ValidationFailure"]) -> None:
        lines = "\n".join(f" -- {f.property_name}: {f.error_message}" for f in failures)
        super().__init__(f"Validation failed:\n{lines}")
        self.failures = list(failures)
