"""
TCP Networking Utilities for the Gateway and Workers

Format:
    Request:  [N bytes: command line, no terminator]
    Response: [M bytes: anything], ended by the peer closing the connection
"""

from __future__ import annotations

import logging
import socket
import threading
import time
from typing import Callable

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT = 5.0
RECV_TIMEOUT = 60.0
SEND_TIMEOUT = 30.0
RECV_CHUNK = 4096


class TCPError(Exception):
    """Base Exception for TCP Operations."""
    pass


class ConnectionFailed(TCPError):
    """Raised when connection can't be established."""
    pass

class SendFailed(TCPError):
    """Raised when sending data fails."""
    pass

class RecvFailed(TCPError):
    """Raised when receiving data fails."""
    pass

class RecvTimeout(RecvFailed):
    """Raised when the peer doesn't close within the read deadline."""
    pass


ProgressCallback = Callable[[str], None]


def recv_until_close(conn: socket.socket, timeout: float) -> bytes:
    """Read until the peer closes. The whole loop shares one deadline."""
    deadline = time.monotonic() + timeout
    buf = bytearray()
    while True:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise RecvTimeout(f"No close after {timeout}s ({len(buf)} bytes read)")
        conn.settimeout(remaining)
        try:
            chunk = conn.recv(RECV_CHUNK)
        except socket.timeout as e:
            raise RecvTimeout(f"No close after {timeout}s ({len(buf)} bytes read)") from e
        except OSError as e:
            raise RecvFailed(f"Connection lost after {len(buf)} bytes: {e}") from e
        if not chunk:
            break
        buf += chunk
    return bytes(buf)


def request_until_close(
    host: str,
    port: int,
    payload: bytes,
    connect_timeout: float = CONNECT_TIMEOUT,
    read_timeout: float = RECV_TIMEOUT,
    on_progress: ProgressCallback | None = None,
) -> bytes:
    """
    Send one payload and return everything the peer writes before closing.

    on_progress is called with "connecting", "sent" and "receiving" as the
    exchange moves forward.

    Raises:
        ConnectionFailed: refused, unreachable, or connect timeout
        SendFailed: the payload couldn't be written
        RecvTimeout: the peer didn't close within read_timeout
        RecvFailed: the connection was reset while reading
    """
    notify = on_progress or (lambda _stage: None)

    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        notify("connecting")
        sock.settimeout(connect_timeout)
        try:
            sock.connect((host, port))
        except socket.timeout as e:
            raise ConnectionFailed(f"Timeout connecting to {host}:{port}") from e
        except OSError as e:
            raise ConnectionFailed(f"Failed to connect to {host}:{port}: {e}") from e

        sock.settimeout(SEND_TIMEOUT)
        try:
            sock.sendall(payload)
        except OSError as e:
            raise SendFailed(f"Failed to send to {host}:{port}: {e}") from e
        notify("sent")

        logger.debug("Sent %d bytes to %s:%d", len(payload), host, port)
        notify("receiving")
        return recv_until_close(sock, read_timeout)


ConnectionHandler = Callable[[socket.socket, tuple[str, int]], None]


def tcp_server(
    host: str,
    port: int,
    shutdown_event: threading.Event,
    connection_handler: ConnectionHandler,
    ready_event: threading.Event | None = None,
) -> None:
    """Run TCP server that hands every accepted connection to its own thread."""

    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
        sock.listen(16)

        sock.settimeout(1.0)

        logger.info("TCP Server listening on %s:%d", host, port)
        if ready_event is not None:
            ready_event.set()

        while not shutdown_event.is_set():
            try:
                conn, addr = sock.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if shutdown_event.is_set():
                    break
                logger.error("Accept failed %s", e)
                continue

            threading.Thread(
                target=_serve_connection,
                args=(conn, addr, connection_handler),
                daemon=True,
            ).start()

        logger.info("TCP Server shutting down")


def _serve_connection(
    conn: socket.socket,
    addr: tuple[str, int],
    connection_handler: ConnectionHandler,
) -> None:
    with conn:
        conn.settimeout(RECV_TIMEOUT)
        try:
            connection_handler(conn, addr)
        except (ConnectionError, socket.timeout) as e:
            logger.warning("Connection error from %s: %s", addr, e)
        except Exception:
            logger.exception("Unexpected error handling connection from %s", addr)
