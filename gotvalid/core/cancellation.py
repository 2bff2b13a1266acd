# gotvalid/core/cancellation.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import threading


class CancellationToken:
    """
    Cooperative cancellation signal for a validation run. The executor checks
    it between rules and between components; a cancelled run stops early and
    returns the failures accumulated so far.

    Backed by a threading.Event so it may be cancelled from another thread.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """
        Request cancellation. Idempotent.
        """
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        """Whether cancellation has been requested."""
        return self._event.is_set()
