"""
Shared networking and protocol types for SmartFilter

The package is a dependency of both gateway and worker:
- Gateway uses it for the worker bridge, result translation and naming
- Worker uses it for its TCP server and command parsing

Deployment:
    pip install smartfilter
"""

from .protocol import (
    DELIMITER,
    STATUS_FAILED,
    STATUS_OK,
    EmptyResponse,
    FilterCommand,
    FilterResult,
    ProtocolError,
    build_reply,
    has_delimiter,
    translate_response,
)
from .tcp import (
    ConnectionFailed,
    RecvFailed,
    RecvTimeout,
    SendFailed,
    TCPError,
    recv_until_close,
    request_until_close,
    tcp_server,
)
from .files import (
    OUTPUT_SUFFIX,
    find_free_tcp_port,
    is_in_dir,
    new_output_name,
    new_staging_name,
    resolve_in_dir,
)

__all__ = [
    # Protocol
    "DELIMITER",
    "STATUS_FAILED",
    "STATUS_OK",
    "ProtocolError",
    "EmptyResponse",
    "FilterCommand",
    "FilterResult",
    "build_reply",
    "has_delimiter",
    "translate_response",
    # TCP
    "TCPError",
    "ConnectionFailed",
    "SendFailed",
    "RecvFailed",
    "RecvTimeout",
    "recv_until_close",
    "request_until_close",
    "tcp_server",
    # Files
    "OUTPUT_SUFFIX",
    "is_in_dir",
    "resolve_in_dir",
    "new_output_name",
    "new_staging_name",
    "find_free_tcp_port",
]
