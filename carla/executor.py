"""Single-threaded executor that drives coroutines with wakers and a reactor."""

from __future__ import annotations

import inspect
import threading
from collections.abc import Coroutine
from contextvars import ContextVar
from typing import Any, TypeVar

from carla.reactor import Reactor, get_reactor
from carla.task_queue import Task, TaskQueue
from carla.waker import Waker, waker

T = TypeVar("T")

_current_waker: ContextVar[Waker | None] = ContextVar("carla_current_waker", default=None)


def current_waker() -> Waker:
    """Return the waker of the task being polled; raise if no task is running."""
    active = _current_waker.get()
    if active is None:
        raise RuntimeError("no task is currently being polled")
    return active


class Executor:
    """Polls spawned tasks until each finishes or waits on I/O.

    A task that suspends without arranging to be woken is abandoned once
    nothing else is runnable and the reactor has nothing to wait for.
    """

    def __init__(self) -> None:
        self._queue = TaskQueue()

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> None:
        """Queue a coroutine to run as a new task."""
        if not inspect.iscoroutine(coro):
            raise TypeError(f"expected a coroutine, got {type(coro).__name__}")
        self._queue.push(Task(coro))

    def run(self) -> None:
        """Run tasks until none is runnable and no I/O is awaited.

        An exception raised by a task propagates out of this call.
        """
        reactor = get_reactor()
        while True:
            while (task := self._queue.pop()) is not None:
                self._poll(task)

            self._queue.recv()
            if not self._queue.is_empty():
                continue
            if not reactor.waiting_on_events():
                return

            self._wait_for_io(reactor)
            self._queue.recv()

    def _poll(self, task: Task) -> None:
        send = self._queue.sender()

        def reschedule() -> None:
            send(task)

        token = _current_waker.set(waker(reschedule))
        try:
            task.coro.send(None)
        except StopIteration:
            pass
        finally:
            _current_waker.reset(token)

    @staticmethod
    def _wait_for_io(reactor: Reactor) -> None:
        events = reactor.wait(None)
        for ready in reactor.drain_wakers(events):
            ready.wake()

    def __repr__(self) -> str:
        return f"Executor(queue={self._queue!r})"


_executor: Executor | None = None
_executor_lock = threading.Lock()


def _global_executor() -> Executor:
    global _executor
    with _executor_lock:
        if _executor is None:
            _executor = Executor()
        return _executor


def spawn(coro: Coroutine[Any, Any, Any]) -> None:
    """Queue a coroutine on the process-wide executor."""
    _global_executor().spawn(coro)


def block_on(coro: Coroutine[Any, Any, T]) -> T:
    """Run ``coro`` and every other queued task; return ``coro``'s result."""
    if not inspect.iscoroutine(coro):
        raise TypeError(f"expected a coroutine, got {type(coro).__name__}")
    results: list[T] = []

    async def capture() -> None:
        results.append(await coro)

    executor = _global_executor()
    executor.spawn(capture())
    executor.run()
    if not results:
        raise RuntimeError("the coroutine was suspended and never woken")
    return results[0]