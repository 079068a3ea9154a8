"""
Worker bridge for the SmartFilter gateway.

One FilterJob per upload, one WorkerBridge per job, one TCP connection per
bridge. Nothing is shared between jobs except the BackendConfig value.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, NoReturn

from smartfilter_shared import protocol
from smartfilter_shared.files import new_output_name
from smartfilter_shared.tcp import (
    ConnectionFailed,
    RecvFailed,
    RecvTimeout,
    SendFailed,
    request_until_close,
)

from .. import errors
from ..config import BackendConfig

logger = logging.getLogger(__name__)

BridgeState = Literal["idle", "connecting", "sent", "receiving", "closed", "failed"]

_PROGRESS_STATES: dict[str, BridgeState] = {
    "connecting": "connecting",
    "sent": "sent",
    "receiving": "receiving",
}


@dataclass(frozen=True)
class FilterJob:
    """One upload on its way to the worker."""
    input_path: Path
    output_path: Path
    output_name: str
    mode: str = ""

    @classmethod
    def create(cls, input_path: Path, output_dir: Path, mode: str) -> "FilterJob":
        """Assign a fresh output name inside output_dir."""
        output_name = new_output_name()
        return cls(
            input_path=input_path.resolve(),
            output_path=(output_dir / output_name).resolve(),
            output_name=output_name,
            mode=mode,
        )

    def command(self) -> protocol.FilterCommand:
        return protocol.FilterCommand(
            input_path=str(self.input_path),
            output_path=str(self.output_path),
            mode=self.mode,
        )


class WorkerBridge:
    """Runs the single request/response exchange for one job."""

    def __init__(self, backend: BackendConfig):
        self._backend = backend
        self.state: BridgeState = "idle"
        self.error: str | None = None

    def run(self, job: FilterJob) -> protocol.FilterResult:
        """
        Send the job's command and translate the worker's reply.

        Raises:
            InvalidCommand: a path holds the command delimiter
            BackendUnavailable: connect or send failed
            BackendTimeout: no close within the read timeout
            BackendDisconnected: connection reset while reading
            EmptyResponse: closed without a single byte
        """
        if self.state != "idle":
            raise RuntimeError(f"WorkerBridge already used (state={self.state})")

        try:
            payload = job.command().get_bytes()
        except protocol.ProtocolError as e:
            self._fail(errors.InvalidCommand(str(e)))

        backend = self._backend
        try:
            raw = request_until_close(
                backend.host,
                backend.port,
                payload,
                connect_timeout=backend.connect_timeout,
                read_timeout=backend.read_timeout,
                on_progress=self._advance,
            )
        except (ConnectionFailed, SendFailed) as e:
            self._fail(errors.BackendUnavailable(str(e)))
        except RecvTimeout as e:
            self._fail(errors.BackendTimeout(str(e)))
        except RecvFailed as e:
            self._fail(errors.BackendDisconnected(str(e)))

        try:
            result = protocol.translate_response(raw, job.output_name)
        except protocol.EmptyResponse as e:
            self._fail(errors.EmptyResponse(str(e)))

        self.state = "closed"
        logger.info(
            "Job %s finished with status %d (%d response bytes)",
            job.output_name, result.status_code, len(raw),
        )
        return result

    def _advance(self, stage: str) -> None:
        self.state = _PROGRESS_STATES[stage]
        logger.debug("Bridge -> %s", self.state)

    def _fail(self, error: errors.GatewayError) -> NoReturn:
        self.state = "failed"
        self.error = error.description
        logger.warning("Bridge failed: %s: %s", type(error).__name__, error.description)
        raise error


def run_job(backend: BackendConfig, input_path: Path, output_dir: Path, mode: str) -> protocol.FilterResult:
    """Build a job for a staged upload and run it through a fresh bridge."""
    job = FilterJob.create(input_path, output_dir, mode)
    logger.info("Dispatching %s (mode=%r) to %s:%d", job.output_name, mode, backend.host, backend.port)
    return WorkerBridge(backend).run(job)
