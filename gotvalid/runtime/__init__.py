"""
Runtime package for rule execution.

Architecture:
- Walks rule sets against a validation context
- Synchronous, asynchronous and parallel scheduling
- Helpers for mixing sync and async callables
"""

from .executor import RuleExecutor

__all__ = ["RuleExecutor"]
