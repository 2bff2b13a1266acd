# gotvalid/core/failures.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from dataclasses import dataclass
from typing import Any, Optional

from gotvalid.core.types import Severity


@dataclass(frozen=True)
class ValidationFailure:
    """
    A single failed check. Created by a rule component when its predicate
    reports failure and appended to the validation context.

    :param property_name: Name of the failing property, indexed for collection elements.
    :param error_message: Human readable message.
    :param attempted_value: The value that failed validation.
    :param severity: Severity of the failure.
    :param error_code: Optional code, defaults to the name of the failing component.
    :param custom_state: Optional state produced by the component's state factory.
    """

    property_name: Optional[str]
    error_message: str
    attempted_value: Any = None
    severity: Severity = Severity.ERROR
    error_code: Optional[str] = None
    custom_state: Any = None

    def __str__(self) -> str:
        return self.error_message
