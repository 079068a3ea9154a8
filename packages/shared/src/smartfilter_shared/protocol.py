"""
Protocol definitions for the SmartFilter gateway <-> worker exchange.

Message Flow (one connection per job):
    Gateway -> Worker: "<input_path>,<output_path>,<mode>" (single write, no terminator)
    Worker -> Gateway: [status byte][optional trailing bytes], then close

The worker closing its end is the only end-of-response signal. There is no
length prefix and no acknowledgment step.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

DELIMITER = ","
ENCODING = "utf-8"

# Status byte written by the reference worker
STATUS_FAILED: Literal[0] = 0
STATUS_OK: Literal[1] = 1


class ProtocolError(Exception):
    """Raised when a command or response can't be built or parsed."""
    pass


class EmptyResponse(ProtocolError):
    """Raised when the worker closed the connection without sending a byte."""
    pass


def has_delimiter(value: str) -> bool:
    return DELIMITER in value


@dataclass(frozen=True)
class FilterCommand:
    """Gateway -> Worker request line."""
    input_path: str
    output_path: str
    mode: str = ""

    def __post_init__(self) -> None:
        for field_name in ("input_path", "output_path"):
            value = getattr(self, field_name)
            if not value:
                raise ProtocolError(f"{field_name} is empty.")
            if has_delimiter(value):
                raise ProtocolError(
                    f"{field_name} contains the '{DELIMITER}' delimiter: {value!r}"
                )

    def get_line(self) -> str:
        return DELIMITER.join((self.input_path, self.output_path, self.mode))

    def get_bytes(self) -> bytes:
        return self.get_line().encode(ENCODING)

    @classmethod
    def parse(cls, data: bytes) -> "FilterCommand":
        """Worker side: split a received command into its three fields."""
        try:
            line = data.decode(ENCODING)
        except UnicodeDecodeError as e:
            raise ProtocolError(f"Command is not valid {ENCODING}") from e

        tokens = line.split(DELIMITER)
        if len(tokens) != 3:
            raise ProtocolError(
                f"Expected 3 fields, got {len(tokens)}: {line!r}"
            )
        input_path, output_path, mode = tokens
        return cls(input_path=input_path, output_path=output_path, mode=mode)


@dataclass(frozen=True)
class FilterResult:
    """
    Result of one job as returned to the HTTP caller.

    Only the first response byte is interpreted. Anything after it is kept
    in ``trailer`` but not serialized, so the wire contract can grow without
    changing the HTTP body.
    """
    status_code: int
    output_name: str
    trailer: bytes = b""

    def to_dict(self) -> dict[str, Any]:
        return {"response": self.status_code, "output": self.output_name}


def translate_response(raw: bytes, output_name: str) -> FilterResult:
    """
    Derive a FilterResult from the full worker response.

    Raises EmptyResponse: if the worker sent nothing before closing
    """
    if not raw:
        raise EmptyResponse("Worker closed the connection without a response")
    return FilterResult(
        status_code=raw[0],
        output_name=output_name,
        trailer=bytes(raw[1:]),
    )


def build_reply(status: int) -> bytes:
    """Worker -> Gateway reply: status byte followed by a NUL."""
    if not (0 <= status <= 255):
        raise ProtocolError(f"Status must fit in one byte, got {status}")
    return bytes((status, 0))
