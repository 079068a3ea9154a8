"""Worker server implementation."""

from __future__ import annotations

import logging
import socket
import threading
from pathlib import Path

from smartfilter_shared import protocol
from smartfilter_shared.tcp import tcp_server
from smartfilter_filters import FilterError, parse_mode, process_image

from .config import WorkerConfig

logger = logging.getLogger(__name__)


class WorkerServer:
    """Worker process that filters one image per connection."""

    def __init__(self, config: WorkerConfig):
        self._config = config
        self._host = config.host
        self._port = config.port

        self._shutdown = threading.Event()
        self._ready = threading.Event()

    @property
    def ready(self) -> threading.Event:
        return self._ready

    def run(self) -> None:
        """Run the worker until shutdown."""
        logger.info("Starting worker at %s:%d", self._host, self._port)
        tcp_server(
            self._host, self._port, self._shutdown,
            self._handle_connection, ready_event=self._ready,
        )
        logger.info("Worker stopped")

    def shutdown(self) -> None:
        self._shutdown.set()

    def _handle_connection(self, conn: socket.socket, addr: tuple[str, int]) -> None:
        # One read only: the gateway sends no terminator and waits for our close.
        data = conn.recv(self._config.max_command_length)
        logger.info("Read from %s: %r", addr, data)
        status = self.process_command(data)
        conn.sendall(protocol.build_reply(status))

    def process_command(self, data: bytes) -> int:
        """Run one command and return the status byte for the reply."""
        try:
            command = protocol.FilterCommand.parse(data)
        except protocol.ProtocolError as e:
            logger.warning("Malformed command: %s", e)
            return protocol.STATUS_FAILED

        filter_type = parse_mode(command.mode)
        try:
            process_image(Path(command.input_path), Path(command.output_path), filter_type)
        except FilterError as e:
            logger.error("Job failed: %s", e)
            return protocol.STATUS_FAILED
        except Exception:
            logger.exception("Unexpected error filtering %s", command.input_path)
            return protocol.STATUS_FAILED

        logger.info("Wrote %s (%s)", command.output_path, filter_type.name.lower())
        return protocol.STATUS_OK
