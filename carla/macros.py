"""Decorator that turns a coroutine function into a blocking entry point."""

from __future__ import annotations

import functools
import inspect
from collections.abc import Callable, Coroutine
from typing import Any, ParamSpec, TypeVar

from carla.executor import block_on

P = ParamSpec("P")
T = TypeVar("T")


def main(func: Callable[P, Coroutine[Any, Any, T]]) -> Callable[P, T]:
    """Wrap ``func`` so that calling it runs the coroutine to completion."""
    if not inspect.iscoroutinefunction(func):
        raise TypeError(f"{getattr(func, '__name__', func)!r} is not an async function")

    @functools.wraps(func)
    def run(*args: P.args, **kwargs: P.kwargs) -> T:
        return block_on(func(*args, **kwargs))

    return run