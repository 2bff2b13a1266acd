# gotvalid/core/selectors.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from typing import Iterable, Optional, Tuple

DEFAULT_RULE_SET = "default"
WILDCARD_RULE_SET = "*"


class RuleSetSelector:
    """
    Decides which rules take part in a validation run based on their rule-set tags.

    - With no names requested only the default rule set runs.
    - Untagged rules and rules tagged "default" belong to the default set.
    - "*" selects every rule.
    - Otherwise a rule runs when any of its tags was requested.

    Names that match no rule simply select nothing.
    """

    def __init__(self, rule_sets: Optional[Iterable[str]] = None) -> None:
        names = tuple(rule_sets) if rule_sets else ()
        for name in names:
            if not isinstance(name, str):
                raise TypeError("Rule-set names must be strings")
        self._rule_sets: Tuple[str, ...] = names or (DEFAULT_RULE_SET,)

    @property
    def rule_sets(self) -> Tuple[str, ...]:
        """The requested rule-set names."""
        return self._rule_sets

    def can_execute(self, rule) -> bool:
        """
        Return True if the rule belongs to one of the requested rule sets.

        :param rule: Any object exposing a ``rule_sets`` tuple.
        """
        if WILDCARD_RULE_SET in self._rule_sets:
            return True
        tags = rule.rule_sets or (DEFAULT_RULE_SET,)
        return any(tag in self._rule_sets for tag in tags)

    def __repr__(self) -> str:
        return f"RuleSetSelector({list(self._rule_sets)!r})"
