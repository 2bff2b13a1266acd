# gotvalid/options.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from dataclasses import dataclass

from gotvalid.core.collection_rules import default_index_builder
from gotvalid.core.types import CascadeMode
from gotvalid.interfaces.types import IndexBuilder


@dataclass(frozen=True)
class ValidatorOptions:
    """
    Configuration of a Validator. Applied when rules are created and when a
    run is started; rules already built keep the values they were built with.

    :param cascade_mode: Cascade mode given to new rules.
    :param parallel: Default scheduling for validate_async.
    :param index_builder: Index builder given to new collection rules.
    """

    cascade_mode: CascadeMode = CascadeMode.CONTINUE
    parallel: bool = False
    index_builder: IndexBuilder = default_index_builder

    def __post_init__(self) -> None:
        if not isinstance(self.cascade_mode, CascadeMode):
            raise ValueError("cascade_mode must be a CascadeMode enum value")
        if not callable(self.index_builder):
            raise TypeError("index_builder must be callable")
