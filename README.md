# carla

A small single-threaded async runtime. It has a task queue, an executor that
drives coroutines, a reactor that watches sockets for readiness, and
non-blocking TCP listener and client types that plug into them. It uses only
the standard library.

## Running coroutines

```python
from carla.executor import block_on, spawn

async def compute():
    return 10

async def job():
    x = await compute()
    assert x == 10
    return x

assert block_on(job()) == 10
```

`block_on` schedules a coroutine on the shared executor, runs it together
with every other queued task until none is runnable and no task is waiting
on I/O, and returns the coroutine's result. `spawn` queues another coroutine
on the same executor. Both raise `TypeError` when given something that is not
a coroutine. An exception raised by a task comes out of `block_on`; if the
coroutine suspends and is never woken, `block_on` raises `RuntimeError`.

You can also create your own `carla.executor.Executor` and use its `spawn`
and `run` methods directly.

The `carla.macros.main` decorator turns an `async def` into a plain function
that runs the coroutine with `block_on` and returns its result. Decorating
anything other than an async function raises `TypeError`.

```python
from carla.macros import main

@main
async def run():
    return "done"

assert run() == "done"
```

## TCP

```python
from carla.macros import main
from carla.net import TcpListener

@main
async def echo_once():
    with TcpListener.bind("127.0.0.1:8080") as listener:
        client, addr = await listener.accept()
        with client:
            data = await client.read(1024)
            await client.write(data)
```

- `TcpListener.bind(addr)` takes `host:port` (or `[host]:port` for IPv6) and
  raises `ValueError` for a malformed address. `local_addr` gives the bound
  address.
- `TcpListener.accept()` waits for a connection and returns a `TcpClient`
  along with the peer address.
- `TcpClient.read(size)` returns up to `size` bytes; an empty result means
  the peer closed the stream. `TcpClient.write(data)` returns how many bytes
  were sent, which may be fewer than `len(data)`.
- While a socket is not ready, the task is parked on the reactor and other
  tasks run in the meantime.
- Both types are context managers; `close()` may be called more than once.
  Using a closed socket raises `OSError`.

## Lower-level pieces

- `carla.executor.current_waker()` returns the waker of the task being
  polled, for writing your own awaitables. Outside a task it raises
  `RuntimeError`.
- `carla.reactor.get_reactor()` returns the process-wide `Reactor`. Sources
  are registered with `add`, and `wake_on_readable` / `wake_on_writable`
  attach a waker. Interest is one-shot: once drained, a source is not
  watched again until a task asks for it.
- `carla.waker.Waker` wraps a callback; `carla.task_queue.TaskQueue` holds
  runnable `Task` objects and a thread-safe channel for resubmitted ones.

## Example server

The package ships a tiny HTTP server that answers every connection with a
fixed HTML page and prints each request and response:

```
carla-simple-http
```

It listens on `127.0.0.1:8080` unless you give it another address:

```
carla-simple-http 127.0.0.1:9000
```

It stops when accepting a connection fails, exiting with status 1 and an
error message if the address cannot be bound. `carla.simple_http` also
offers `build_response(content)` and the coroutine `serve(addr)`, which
accepts either an address string or an already bound `TcpListener`.

## What it does not do

There are no timers, sleeps or timeouts, and everything runs on one thread.
The example server does not parse HTTP: it reads a single chunk of at most
1024 bytes from each connection and always sends the same page.

## Tests

```
pip install .[test]
pytest
```