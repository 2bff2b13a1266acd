# tests/conftest.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import threading
from dataclasses import dataclass, field
from typing import List, Optional
from unittest.mock import MagicMock

import pytest


@dataclass
class Address:
    line1: Optional[str] = None
    postcode: Optional[str] = None


@dataclass
class Person:
    name: Optional[str] = None
    age: Optional[int] = None
    email: Optional[str] = None
    items: Optional[List[Optional[str]]] = field(default_factory=list)
    address: Optional[Address] = None


@pytest.fixture
def person():
    """A Person that passes every rule used in the tests."""
    return Person(name="Ada", age=36, email="ada@example.com", items=["x", "y"], address=Address("1 Main St", "AB1"))


@pytest.fixture
def person_cls():
    return Person


@pytest.fixture
def address_cls():
    return Address


@pytest.fixture
def member():
    """Factory for attribute member descriptors."""
    from gotvalid.core.members import MemberDescriptor

    def _member(name, declared_type=object):
        return MemberDescriptor.attribute(name, declared_type)

    return _member


@pytest.fixture
def context_factory():
    """Returns a factory creating a fresh ValidationContext."""
    from gotvalid.core.context import ValidationContext
    from gotvalid.core.selectors import RuleSetSelector

    def _factory(instance, rule_sets=None, data=None, cancellation=None):
        return ValidationContext(instance, selector=RuleSetSelector(rule_sets), data=data, cancellation=cancellation)

    return _factory


@pytest.fixture
def spy():
    """Factory for a predicate spy returning a fixed result."""

    def _spy(result=True):
        return MagicMock(return_value=result)

    return _spy


@pytest.fixture
def not_null():
    def not_null(value, context):
        return value is not None

    return not_null


@pytest.fixture
def greater_than():
    def _greater_than(limit):
        def greater_than(value, context):
            return value > limit

        return greater_than

    return _greater_than


@pytest.fixture
def error_classes():
    """Provides a tuple of error classes for quick reference."""
    from gotvalid.core.errors import (
        AsyncValidatorInvokedSynchronouslyError,
        ConfigurationError,
        GotValidError,
        RuleSealedError,
        ValidationError,
    )

    return (GotValidError, ConfigurationError, AsyncValidatorInvokedSynchronouslyError, RuleSealedError, ValidationError)


@pytest.fixture(autouse=True)
def cleanup_threads():
    yield
    # Cleanup any remaining threads after each test
    for thread in threading.enumerate():
        if thread != threading.current_thread() and thread.is_alive() and not thread.daemon:
            thread.join(timeout=1.0)
