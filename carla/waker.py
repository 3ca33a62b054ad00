"""Wakers: handles that reschedule a suspended task when called."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass


@dataclass(frozen=True, eq=False)
class Waker:
    """A shareable handle that runs its callback each time it is woken."""

    callback: Callable[[], None]

    def wake(self) -> None:
        """Run the callback. A waker may be woken any number of times."""
        self.callback()


def waker(callback: Callable[[], None]) -> Waker:
    """Build a waker that invokes ``callback`` when woken."""
    return Waker(callback)