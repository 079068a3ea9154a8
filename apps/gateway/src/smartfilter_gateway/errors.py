"""Errors a job can end with, each mapped to an HTTP status."""

from __future__ import annotations

from typing import Any


class GatewayError(Exception):
    """Base error for a failed request. Rendered as JSON by the app."""
    code = 500

    def __init__(self, description: str):
        super().__init__(description)
        self.description = description

    def to_dict(self) -> dict[str, Any]:
        return {"error": type(self).__name__, "description": self.description}


class InvalidUpload(GatewayError):
    """The photo field is missing or empty."""
    code = 400


class StagingFailed(GatewayError):
    """The upload couldn't be written to the staging directory."""
    code = 500


class InvalidCommand(GatewayError):
    """A staged path can't be put on the command line."""
    code = 500


class BackendUnavailable(GatewayError):
    """The worker couldn't be reached within the connect timeout."""
    code = 502


class BackendDisconnected(GatewayError):
    """The worker dropped the connection mid-response."""
    code = 502


class BackendTimeout(GatewayError):
    """The worker didn't finish within the read timeout."""
    code = 504


class EmptyResponse(GatewayError):
    """The worker closed without sending a status byte."""
    code = 502


class RetrievalNotFound(GatewayError):
    """No output file by that name in the output directory."""
    code = 404
