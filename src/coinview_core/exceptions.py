"""Error taxonomy for the fetch-decode-cache pipeline.

The network client and the decoder raise these; the view-state controllers
are the only place they are turned into user-visible state.
"""

from __future__ import annotations

from enum import Enum


class ServerErrorKind(Enum):
    """Status codes documented by CoinAPI's REST API."""

    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    TOO_MANY_REQUESTS = 429
    NO_DATA = 550

    @classmethod
    def from_status(cls, status_code: int | None) -> ServerErrorKind | None:
        """Map an HTTP status to a recognised kind, or None if undocumented."""
        if status_code is None:
            return None
        try:
            return cls(status_code)
        except ValueError:
            return None


class CoinviewError(Exception):
    """Base exception for all coinview_core errors."""

    message = "Something went wrong"

    def __str__(self) -> str:
        return self.message


class InvalidRequest(CoinviewError):
    """Raised when a request URL cannot be constructed."""

    def __init__(self, reason: str = "") -> None:
        super().__init__(reason)
        self.reason = reason
        self.message = f"Invalid request: {reason}" if reason else "Invalid request"


class Offline(CoinviewError):
    """Raised when the connectivity gate reports no usable network path."""

    message = "The network appears to be offline"


class ServerError(CoinviewError):
    """Raised for any response other than HTTP 200.

    ``kind`` is None both for undocumented status codes and for transport
    failures that never produced a well-formed HTTP response (in which case
    ``status_code`` is None too).
    """

    def __init__(
        self,
        kind: ServerErrorKind | None,
        message: str,
        status_code: int | None = None,
    ) -> None:
        super().__init__(kind, message, status_code)
        self.kind = kind
        self.message = message
        self.status_code = status_code

    def __repr__(self) -> str:
        return (
            f"ServerError(kind={self.kind!r}, message={self.message!r}, "
            f"status_code={self.status_code!r})"
        )


class DecodingFailed(CoinviewError):
    """Raised when response bytes do not match the expected model shape."""

    message = "The server response could not be decoded"
