from __future__ import annotations

from typing import Any, Callable

from flask_socketio import SocketIO


class SocketIOScheduler:
    """Runs delayed game work on the Socket.IO server's background workers.

    Under eventlet these are green threads: a task only yields to other
    handlers while sleeping or waiting on I/O.
    """

    def __init__(self, socketio: SocketIO) -> None:
        self._socketio = socketio

    def spawn(self, fn: Callable[..., Any], *args: Any) -> Any:
        return self._socketio.start_background_task(fn, *args)

    def sleep(self, seconds: float) -> None:
        self._socketio.sleep(seconds)
