"""Run queue of tasks, fed directly or through a thread-safe channel."""

from __future__ import annotations

import queue
from collections.abc import Callable, Coroutine
from dataclasses import dataclass, field
from typing import Any


@dataclass(eq=False)
class Task:
    """A unit of work: a coroutine driven step by step by the executor."""

    coro: Coroutine[Any, Any, Any] = field(repr=False)

    def __repr__(self) -> str:
        return "Task(...)"


class TaskQueue:
    """Tasks ready to run, plus a channel through which wakers resubmit tasks.

    Tasks pushed directly are immediately runnable; tasks sent through the
    channel become runnable only after :meth:`recv` collects them.
    """

    def __init__(self) -> None:
        self._channel: queue.SimpleQueue[Task] = queue.SimpleQueue()
        self._tasks: list[Task] = []

    def sender(self) -> Callable[[Task], None]:
        """Return a callable, safe to use from any thread, that submits a task."""
        return self._channel.put

    def recv(self) -> None:
        """Move every task waiting in the channel onto the run queue."""
        while True:
            try:
                task = self._channel.get_nowait()
            except queue.Empty:
                return
            self._tasks.append(task)

    def push(self, task: Task) -> None:
        """Add a runnable task."""
        self._tasks.append(task)

    def pop(self) -> Task | None:
        """Take the most recently added task, or ``None`` if there is none."""
        return self._tasks.pop() if self._tasks else None

    def is_empty(self) -> bool:
        """Whether no runnable task is queued."""
        return not self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    def __repr__(self) -> str:
        return f"TaskQueue(tasks={self._tasks!r})"