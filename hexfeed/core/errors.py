"""Error taxonomy shared by the stream, server and shutdown layers."""

from __future__ import annotations


class HexfeedError(Exception):
    """Base error for the service."""


class StreamError(HexfeedError):
    """Failure scoped to a single stream session; never crosses sessions."""


class EntropyUnavailable(StreamError):
    """The secure random source could not supply the requested bytes."""

    def __init__(self, requested: int, read: int, reason: str = "") -> None:
        self.requested = requested
        self.read = read
        self.reason = reason
        detail = f": {reason}" if reason else ""
        super().__init__(f"entropy unavailable (requested={requested}, read={read}){detail}")


class EncodeFailure(StreamError):
    """An event payload could not be rendered into a fragment."""


class TransportWriteFailure(StreamError):
    """Writing a frame to the client transport failed."""


class ListenBindFailure(HexfeedError):
    """The listening socket could not be bound at startup."""

    def __init__(self, host: str, port: int, cause: OSError) -> None:
        self.host = host
        self.port = port
        self.cause = cause
        super().__init__(f"cannot bind {host}:{port}: {cause}")


class ShutdownTimeout(HexfeedError):
    """Sessions were still open when the shutdown grace period ran out."""

    def __init__(self, remaining: int, grace_seconds: float) -> None:
        self.remaining = remaining
        self.grace_seconds = grace_seconds
        super().__init__(
            f"{remaining} session(s) still active after {grace_seconds:.1f}s grace period"
        )
