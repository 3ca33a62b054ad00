"""I/O reactor: maps socket readiness to the wakers waiting on it."""

from __future__ import annotations

import selectors
import threading
from collections.abc import Iterable
from typing import Protocol, Union

from carla.waker import Waker


class _HasFileno(Protocol):
    def fileno(self) -> int: ...


Source = Union[int, _HasFileno]
ReadyEvent = tuple[int, int]


def _key(source: Source) -> int:
    return source if isinstance(source, int) else source.fileno()


class Reactor:
    """Tracks readable and writable interest per source and waits for readiness.

    Interest is one-shot: once wakers for a source are drained, the source is
    no longer watched until a task asks to be woken on it again.
    """

    def __init__(self) -> None:
        self._readable: dict[int, list[Waker]] = {}
        self._writable: dict[int, list[Waker]] = {}
        self._added: set[int] = set()
        self._selector = selectors.DefaultSelector()

    def __enter__(self) -> Reactor:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self._selector.close()

    def get_interest(self, source: Source) -> int:
        """Return the selector event mask currently wanted for ``source``."""
        key = _key(source)
        mask = 0
        if key in self._readable:
            mask |= selectors.EVENT_READ
        if key in self._writable:
            mask |= selectors.EVENT_WRITE
        return mask

    def add(self, source: Source) -> None:
        """Start tracking ``source``; raises ``ValueError`` if already tracked."""
        key = _key(source)
        if key in self._added:
            raise ValueError(f"source {key} is already registered")
        self._added.add(key)
        self._sync(key)

    def remove(self, source: Source) -> None:
        """Stop tracking ``source`` and forget its wakers."""
        key = _key(source)
        if key not in self._added:
            raise KeyError(f"source {key} is not registered")
        self._added.discard(key)
        self._readable.pop(key, None)
        self._writable.pop(key, None)
        if key in self._selector.get_map():
            self._selector.unregister(key)

    def wake_on_readable(self, source: Source, waker: Waker) -> None:
        """Wake ``waker`` once ``source`` becomes readable."""
        key = self._require(source)
        self._readable.setdefault(key, []).append(waker)
        self._sync(key)

    def wake_on_writable(self, source: Source, waker: Waker) -> None:
        """Wake ``waker`` once ``source`` becomes writable."""
        key = self._require(source)
        self._writable.setdefault(key, []).append(waker)
        self._sync(key)

    def drain_wakers(self, events: Iterable[ReadyEvent]) -> list[Waker]:
        """Remove and return the wakers for every ``(fd, mask)`` event.

        For each source, readers come before writers.
        """
        wakers: list[Waker] = []
        for key, _mask in events:
            wakers.extend(self._readable.pop(key, ()))
            wakers.extend(self._writable.pop(key, ()))
            if key in self._added:
                self._sync(key)
        return wakers

    def wait(self, timeout: float | None = None) -> list[ReadyEvent]:
        """Block until a watched source is ready; return ``(fd, mask)`` pairs."""
        return [(key.fd, mask) for key, mask in self._selector.select(timeout)]

    def waiting_on_events(self) -> bool:
        """Whether any task is waiting for readiness."""
        return bool(self._readable) or bool(self._writable)

    def _require(self, source: Source) -> int:
        key = _key(source)
        if key not in self._added:
            raise KeyError(f"source {key} is not registered")
        return key

    def _sync(self, key: int) -> None:
        mask = self.get_interest(key)
        registered = key in self._selector.get_map()
        if mask == 0:
            if registered:
                self._selector.unregister(key)
        elif registered:
            self._selector.modify(key, mask)
        else:
            self._selector.register(key, mask)


_reactor: Reactor | None = None
_reactor_lock = threading.Lock()


def get_reactor() -> Reactor:
    """Return the process-wide reactor, creating it on first use."""
    global _reactor
    with _reactor_lock:
        if _reactor is None:
            _reactor = Reactor()
        return _reactor