"""Configuration management for the SmartFilter gateway."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from smartfilter_shared.protocol import DELIMITER, has_delimiter


@dataclass(frozen=True)
class BackendConfig:
    """Where the worker lives and how long to wait for it."""

    host: str = "127.0.0.1"
    port: int = 9000
    connect_timeout: float = 5.0
    read_timeout: float = 60.0


@dataclass(frozen=True)
class Config:
    """Gateway configuration loaded from environment variables."""

    http_host: str = "0.0.0.0"
    http_port: int = 8080
    backend_host: str = "127.0.0.1"
    backend_port: int = 9000
    connect_timeout: float = 5.0
    read_timeout: float = 60.0
    upload_dir: Path = Path("uploads")
    output_dir: Path = Path("uploads_output")

    @classmethod
    def load(cls) -> Config:
        """Load configuration from environment variables."""
        return cls(
            http_host=os.getenv("SMARTFILTER_HTTP_HOST", "0.0.0.0"),
            http_port=int(os.getenv("SMARTFILTER_HTTP_PORT", "8080")),
            backend_host=os.getenv("SMARTFILTER_BACKEND_HOST", "127.0.0.1"),
            backend_port=int(os.getenv("SMARTFILTER_BACKEND_PORT", "9000")),
            connect_timeout=float(os.getenv("SMARTFILTER_CONNECT_TIMEOUT", "5.0")),
            read_timeout=float(os.getenv("SMARTFILTER_READ_TIMEOUT", "60.0")),
            upload_dir=Path(os.getenv("SMARTFILTER_UPLOAD_DIR", "uploads")),
            output_dir=Path(os.getenv("SMARTFILTER_OUTPUT_DIR", "uploads_output")),
        )

    @property
    def backend(self) -> BackendConfig:
        return BackendConfig(
            host=self.backend_host,
            port=self.backend_port,
            connect_timeout=self.connect_timeout,
            read_timeout=self.read_timeout,
        )

    def ensure_directories(self) -> None:
        """Create all required directories."""
        for directory in (self.upload_dir, self.output_dir):
            # Paths go into the worker command line unescaped.
            if has_delimiter(str(directory.resolve())):
                raise ValueError(
                    f"Directory path must not contain '{DELIMITER}': {directory.resolve()}"
                )
            directory.mkdir(parents=True, exist_ok=True)
