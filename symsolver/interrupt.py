"""Cooperative cancellation of solver queries."""

from __future__ import annotations

import threading

from .errors import ExternalInterrupt


class Interrupt:
    """
    A cancellation flag that may be set from any thread.

    The solver samples the flag between units of work; it never preempts a
    running call into Z3. The flag stays set until cleared, so one Interrupt
    can stop several solvers that share it.
    """

    def __init__(self) -> None:
        """Create a new, cleared Interrupt."""
        self._event = threading.Event()

    def set(self) -> None:
        """Request that in-progress and future queries stop."""
        self._event.set()

    def clear(self) -> None:
        """Allow queries to run again."""
        self._event.clear()

    def is_set(self) -> bool:
        """Check whether cancellation has been requested."""
        return self._event.is_set()

    def check(self) -> None:
        """Raise ExternalInterrupt if cancellation has been requested."""
        if self._event.is_set():
            raise ExternalInterrupt()
