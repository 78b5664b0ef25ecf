"""Echo record emitter public API."""

from __future__ import annotations

from .client import (
    EmitStats,
    EmitterConfig,
    connect,
    emit,
    parse_count,
    parse_port,
    parse_source,
    parse_timeout,
    run,
)
from .encoders import ENCODERS, BinaryMapEncoder, Encoder, TextEncoder, get_encoder
from .errors import (
    DecodeError,
    EmitterConnectionError,
    EmitterError,
    EmitterWriteError,
    InvalidCountError,
    InvalidPortError,
    InvalidSourceError,
    InvalidTimeoutError,
    UnknownEncodingError,
    UsageError,
)
from .record import EchoRecord, build_record, iter_records

__all__ = [
    "BinaryMapEncoder",
    "DecodeError",
    "ENCODERS",
    "EchoRecord",
    "EmitStats",
    "EmitterConfig",
    "EmitterConnectionError",
    "EmitterError",
    "EmitterWriteError",
    "Encoder",
    "InvalidCountError",
    "InvalidPortError",
    "InvalidSourceError",
    "InvalidTimeoutError",
    "TextEncoder",
    "UnknownEncodingError",
    "UsageError",
    "build_record",
    "connect",
    "emit",
    "get_encoder",
    "iter_records",
    "parse_count",
    "parse_port",
    "parse_source",
    "parse_timeout",
    "run",
]
