"""Cooperative cancellation for long-running analysis runs."""

from __future__ import annotations

import threading


class CancellationToken:
    """Flag checked between centrality rounds and complexity batches.

    Safe to set from another thread; the analysis finishes its current
    round or batch and returns the partial result it has so far.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()
