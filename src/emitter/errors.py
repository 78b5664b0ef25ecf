"""Exception types raised by the emitter and the sink."""

from __future__ import annotations

from typing import Optional


class EmitterError(Exception):
    """Base class for every error raised by this package."""


class UsageError(EmitterError):
    """Invalid command-line input (reported with exit code 1)."""


class InvalidCountError(UsageError):
    pass


class InvalidPortError(UsageError):
    pass


class UnknownEncodingError(UsageError):
    pass


class InvalidTimeoutError(UsageError):
    pass


class InvalidSourceError(UsageError):
    pass


class EmitterConnectionError(EmitterError, ConnectionError):
    """The target could not be resolved or refused the connection."""

    def __init__(self, host: str, port: int, reason: object) -> None:
        super().__init__(f"failed to connect to {host}:{port}: {reason}")
        self.host = host
        self.port = port


class EmitterWriteError(EmitterError):
    """A blocking write failed part-way through the emit loop."""

    def __init__(self, index: int, reason: object, sent: Optional[int] = None) -> None:
        super().__init__(f"write of message {index} failed: {reason}")
        self.index = index
        self.sent = sent if sent is not None else index


class DecodeError(EmitterError, ValueError):
    """Bytes on the wire could not be decoded into a record."""
