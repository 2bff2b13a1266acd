# gotvalid/interfaces/types.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
from typing import Any, Awaitable, Callable, Iterable, List, Union

RuleSetName = str

# Callback Types
Predicate = Callable[[Any, Any], Union[bool, Awaitable[bool]]]  # (value, context)
ConditionCheck = Callable[[Any], Union[bool, Awaitable[bool]]]  # (context)
MessageFactory = Callable[[Any], str]  # (property context)
StateFactory = Callable[[Any], Any]  # (property context)
DisplayNameFactory = Callable[[Any], str]  # (validation context)
FailureHook = Callable[[Any, List[Any]], Union[None, Awaitable[None]]]  # (instance, failures)
ElementFilter = Callable[[Any], bool]
IndexBuilder = Callable[[Any, Iterable[Any], Any, int], str]
