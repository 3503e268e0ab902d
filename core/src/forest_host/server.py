from __future__ import annotations

import logging
import signal
import socket
from collections.abc import Callable
from types import FrameType

import uvicorn
from fastapi import FastAPI

from forest_host.errors import BindError

logger = logging.getLogger(__name__)


def bind_listener(host: str, port: int) -> socket.socket:
    if not 1 <= port <= 65535:
        raise BindError(f"Port {port} is outside the TCP range", host=host, port=port)

    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host, port))
    except OSError as exc:
        sock.close()
        raise BindError(f"Cannot bind http://{host}:{port}: {exc}", host=host, port=port) from exc

    sock.set_inheritable(True)
    return sock


class HostServer(uvicorn.Server):
    """uvicorn server that hands SIGINT to the host's own shutdown path."""

    def __init__(self, config: uvicorn.Config, *, on_interrupt: Callable[[], None]) -> None:
        super().__init__(config)
        self._on_interrupt = on_interrupt

    def handle_exit(self, sig: int, frame: FrameType | None) -> None:
        if sig == signal.SIGINT:
            self._on_interrupt()
            return
        super().handle_exit(sig, frame)


def build_server(
    app: FastAPI, *, host: str, port: int, on_interrupt: Callable[[], None]
) -> HostServer:
    # log_config=None keeps the process-wide logging handlers. The app has no lifespan.
    config = uvicorn.Config(app, host=host, port=port, log_config=None, lifespan="off")
    return HostServer(config, on_interrupt=on_interrupt)
