# gotvalid/core/members.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from dataclasses import dataclass, field
from operator import attrgetter, itemgetter
from typing import Any, Callable, Optional


@dataclass(frozen=True)
class MemberDescriptor:
    """
    Describes the member a rule validates: its name, declared type and an
    accessor that reads the member's value from the root instance.

    The engine treats the accessor as opaque; how it was built is the concern
    of whatever front end constructed the descriptor.
    """

    name: Optional[str]
    accessor: Callable[[Any], Any] = field(compare=False)
    declared_type: type = object

    def __post_init__(self) -> None:
        if not callable(self.accessor):
            raise TypeError("Member accessor must be callable")

    def get_value(self, instance: Any) -> Any:
        """
        Read this member's value from the instance under validation.

        :param instance: The root value being validated.
        :return: The member's current value.
        """
        return self.accessor(instance)

    @classmethod
    def attribute(cls, name: str, declared_type: type = object) -> "MemberDescriptor":
        """Descriptor reading a (possibly dotted) attribute by name."""
        return cls(name=name, accessor=attrgetter(name), declared_type=declared_type)

    @classmethod
    def key(cls, name: str, declared_type: type = object) -> "MemberDescriptor":
        """Descriptor reading a mapping key."""
        return cls(name=name, accessor=itemgetter(name), declared_type=declared_type)

    @classmethod
    def computed(
        cls, accessor: Callable[[Any], Any], name: Optional[str] = None, declared_type: type = object
    ) -> "MemberDescriptor":
        """Descriptor for a computed value. The name may be None for anonymous values."""
        return cls(name=name, accessor=accessor, declared_type=declared_type)
