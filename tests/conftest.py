"""Shared pytest fixtures: loopback mock workers and gateway apps."""

from __future__ import annotations

import socket
import struct
import threading
import time
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from flask import Flask

from smartfilter_gateway import Config, create_app

BackendHandler = Callable[[socket.socket, bytes], None]


class MockBackend:
    """A TCP peer that records every command and reacts with a handler."""

    def __init__(self, handler: BackendHandler):
        self._handler = handler
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._sock.bind(("127.0.0.1", 0))
        self._sock.listen(8)
        self._sock.settimeout(0.1)
        self.port: int = self._sock.getsockname()[1]

        self.stopped = threading.Event()
        self.received: list[bytes] = []
        self._lock = threading.Lock()
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    @property
    def connections(self) -> int:
        with self._lock:
            return len(self.received)

    def _serve(self) -> None:
        while not self.stopped.is_set():
            try:
                conn, _ = self._sock.accept()
            except socket.timeout:
                continue
            except OSError:
                break
            threading.Thread(target=self._handle, args=(conn,), daemon=True).start()

    def _handle(self, conn: socket.socket) -> None:
        with conn:
            conn.settimeout(5.0)
            data = conn.recv(4096)
            with self._lock:
                self.received.append(data)
            self._handler(conn, data)

    def close(self) -> None:
        self.stopped.set()
        self._thread.join(timeout=2.0)
        self._sock.close()


def reply_with(payload: bytes) -> BackendHandler:
    def handler(conn: socket.socket, data: bytes) -> None:
        conn.sendall(payload)
    return handler


def close_silently(conn: socket.socket, data: bytes) -> None:
    return None


def reset_after(payload: bytes) -> BackendHandler:
    """Send payload, then abort the connection with an RST instead of a FIN."""
    def handler(conn: socket.socket, data: bytes) -> None:
        conn.sendall(payload)
        time.sleep(0.05)
        conn.setsockopt(socket.SOL_SOCKET, socket.SO_LINGER, struct.pack("ii", 1, 0))
    return handler


@pytest.fixture
def mock_backend() -> Iterator[Callable[[BackendHandler], MockBackend]]:
    """Start mock workers on demand; all are stopped after the test."""
    started: list[MockBackend] = []

    def start(handler: BackendHandler) -> MockBackend:
        backend = MockBackend(handler)
        started.append(backend)
        return backend

    yield start

    for backend in started:
        backend.close()


@pytest.fixture
def unused_port() -> int:
    """A loopback port with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., Config]:
    def make(port: int, **overrides) -> Config:
        values = dict(
            backend_host="127.0.0.1",
            backend_port=port,
            connect_timeout=1.0,
            read_timeout=2.0,
            upload_dir=tmp_path / "uploads",
            output_dir=tmp_path / "uploads_output",
        )
        values.update(overrides)
        return Config(**values)
    return make


@pytest.fixture
def make_app(make_config: Callable[..., Config]) -> Callable[..., Flask]:
    def make(port: int, **overrides) -> Flask:
        app = create_app(make_config(port, **overrides))
        app.config["TESTING"] = True
        return app
    return make
