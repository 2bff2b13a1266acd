# gotvalid/core/collection_rules.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional, Tuple

from gotvalid.core.context import ValidationContext
from gotvalid.core.failures import ValidationFailure
from gotvalid.core.members import MemberDescriptor
from gotvalid.core.rules import ValidationRule
from gotvalid.interfaces.types import ElementFilter, IndexBuilder
from gotvalid.runtime.async_support import gather_in_order

logger = logging.getLogger(__name__)


def default_index_builder(instance: Any, collection: Iterable[Any], element: Any, ordinal: int) -> str:
    """Build the default property name suffix, ``[ordinal]``."""
    return f"[{ordinal}]"


def _accept_all(element: Any) -> bool:
    return True


class CollectionRule(ValidationRule):
    """
    A rule applied to every element of an enumerable member.

    Each retained element is run through the component chain as if it were
    the property value, under a property name suffixed by the index builder.
    Ordinals are positions in the original sequence, so elements rejected by
    the filter still advance them.

    The rule passes only if every retained element passed. Dependent rules are
    gated on the rule as a whole, never per element.
    """

    def __init__(
        self,
        member: MemberDescriptor,
        filter: Optional[ElementFilter] = None,
        index_builder: Optional[IndexBuilder] = None,
        concurrent: bool = False,
        **kwargs: Any,
    ) -> None:
        """
        :param member: Descriptor whose accessor returns the collection.
        :param filter: Predicate selecting the elements to validate.
        :param index_builder: Builds the property name suffix for an element.
        :param concurrent: On the async path, validate elements concurrently.
        :param kwargs: Passed through to ValidationRule.
        """
        super().__init__(member, **kwargs)
        self._filter = filter or _accept_all
        self._index_builder = index_builder or default_index_builder
        self._concurrent = concurrent

    @property
    def filter(self) -> ElementFilter:
        return self._filter

    @filter.setter
    def filter(self, predicate: Optional[ElementFilter]) -> None:
        self._check_mutable()
        self._filter = predicate or _accept_all

    @property
    def index_builder(self) -> IndexBuilder:
        return self._index_builder

    @index_builder.setter
    def index_builder(self, builder: Optional[IndexBuilder]) -> None:
        self._check_mutable()
        self._index_builder = builder or default_index_builder

    @property
    def concurrent(self) -> bool:
        return self._concurrent

    @concurrent.setter
    def concurrent(self, value: bool) -> None:
        self._check_mutable()
        self._concurrent = bool(value)

    def _elements(self, context: ValidationContext, collection: Iterable[Any], display_name: Optional[str]):
        """
        Yield (element, property name, display name) for every retained element.
        """
        instance = context.instance_to_validate
        base_name = self._failure_name(display_name) or ""
        base_display = display_name or ""
        for ordinal, element in enumerate(collection):
            if context.is_cancelled:
                logger.debug(f"Validation cancelled while iterating '{base_name}'")
                return
            if not self._filter(element):
                continue
            suffix = self._index_builder(instance, collection, element, ordinal)
            yield element, base_name + suffix, base_display + suffix

    def validate(self, context: ValidationContext) -> bool:
        self.seal()
        if not self._components:
            return True
        self._ensure_sync_conditions()
        if not self._applies(context):
            logger.debug(f"Collection rule for '{self._property_name}' skipped by condition")
            return True

        collection = self._member.get_value(context.instance_to_validate)
        if collection is None:
            return True
        display_name = self.get_display_name(context)

        failures: List[ValidationFailure] = []
        for element, property_name, element_display in self._elements(context, collection, display_name):
            failures.extend(self._run_components(context, element, property_name, element_display))
        return self._complete(context, failures)

    async def validate_async(self, context: ValidationContext) -> bool:
        self.seal()
        if not self._components:
            return True
        if not await self._applies_async(context):
            logger.debug(f"Collection rule for '{self._property_name}' skipped by condition")
            return True

        collection = self._member.get_value(context.instance_to_validate)
        if collection is None:
            return True
        display_name = self.get_display_name(context)

        elements: List[Tuple[Any, str, str]] = list(self._elements(context, collection, display_name))
        if self._concurrent:
            # One slot per retained element, flattened in ordinal order
            slots = await gather_in_order(
                self._run_components_async(context, element, property_name, element_display)
                for element, property_name, element_display in elements
            )
        else:
            slots = []
            for element, property_name, element_display in elements:
                slots.append(await self._run_components_async(context, element, property_name, element_display))

        failures = [failure for slot in slots for failure in slot]
        return await self._complete_async(context, failures)
