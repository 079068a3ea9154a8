"""
File naming and path utilities for the gateway and worker
"""

from __future__ import annotations

import errno
import logging
import socket
import uuid
from pathlib import Path

from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)

OUTPUT_SUFFIX = ".png"


def new_output_name(suffix: str = OUTPUT_SUFFIX) -> str:
    """Collision-resistant output filename, also the public retrieval key."""
    return f"{uuid.uuid4()}{suffix}"


def new_staging_name() -> str:
    """Name for a staged upload. Hex only, so it never holds a delimiter."""
    return uuid.uuid4().hex


def is_in_dir(base: Path, target: Path) -> bool:
    """Check if target path is in base dir."""
    try:
        target.resolve().relative_to(base.resolve())
        return True
    except ValueError:
        return False


def resolve_in_dir(base: Path, name: str) -> Path | None:
    """
    Resolve an opaque name to a file directly inside base.

    Returns None for names secure_filename would rewrite (separators, "..")
    and for anything that lands outside base.
    """
    safe_name = secure_filename(name)
    if not safe_name or safe_name != name:
        logger.warning("Rejected filename: %r", name)
        return None

    target = base / safe_name
    if not is_in_dir(base, target):
        logger.warning("Path traversal attempt: %r", name)
        return None
    return target


def find_free_tcp_port(host: str, start_port: int, max_tries: int = 100) -> int:
    """Find an available TCP port starting from start_port."""
    if not (0 <= start_port <= 65535):
        raise ValueError(f"Port must be 0..65535, got {start_port}")

    for port in range(start_port, min(65536, start_port + max_tries)):
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((host, port))
            logger.debug("Found free port: %d", port)
            return port
        except OSError as e:
            if e.errno in (errno.EADDRINUSE, errno.EACCES):
                continue
            raise
        finally:
            sock.close()

    raise RuntimeError(f"No free TCP port found in range {start_port}-{start_port + max_tries}")
