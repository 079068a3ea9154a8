"""Configuration for the SmartFilter worker."""

from __future__ import annotations

from dataclasses import dataclass

MAX_COMMAND_LENGTH = 4096


@dataclass(frozen=True)
class WorkerConfig:
    """Worker configuration."""

    host: str = "127.0.0.1"
    port: int = 9000
    max_command_length: int = MAX_COMMAND_LENGTH
