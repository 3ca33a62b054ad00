"""A small single-threaded async runtime with a readiness reactor, TCP primitives and an example HTTP server."""

__version__ = "0.1.0"

__all__ = ["executor", "macros", "net", "reactor", "simple_http", "task_queue", "waker"]