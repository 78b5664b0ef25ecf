"""Blocking TCP emitter: one connection, ``count`` sequential writes."""

from __future__ import annotations

import logging
import math
import socket
from dataclasses import dataclass
from typing import Optional, Union

from .encoders import Encoder, get_encoder
from .errors import (
    EmitterConnectionError,
    EmitterWriteError,
    InvalidCountError,
    InvalidPortError,
    InvalidSourceError,
    InvalidTimeoutError,
)
from .record import DEFAULT_SOURCE, build_record

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmitterConfig:
    host: str
    port: int
    count: int = 1
    encoding: str = "text"
    source: str = DEFAULT_SOURCE
    timeout: Optional[float] = None


@dataclass
class EmitStats:
    messages: int = 0
    bytes_sent: int = 0


def _parse_digits(value: str) -> Optional[int]:
    text = value.strip()
    if not (text.isascii() and text.isdigit()):
        return None
    return int(text, 10)


def parse_count(value: Union[str, int]) -> int:
    """Parse the repeat count; it must be a non-negative integer."""
    count = value if isinstance(value, int) else _parse_digits(value)
    if count is None or count < 0:
        raise InvalidCountError(f"count must be a non-negative integer, got {value!r}")
    return count


def parse_port(value: Union[str, int]) -> int:
    port = value if isinstance(value, int) else _parse_digits(value)
    if port is None:
        raise InvalidPortError(f"port must be an integer, got {value!r}")
    if not 0 < port < 65536:
        raise InvalidPortError(f"port must be between 1 and 65535, got {port}")
    return port


def parse_timeout(value: Optional[float]) -> Optional[float]:
    """``None`` means fully blocking; anything else must be finite and positive."""
    if value is None:
        return None
    if not (math.isfinite(value) and value > 0):
        raise InvalidTimeoutError(f"timeout must be a positive number of seconds, got {value!r}")
    return float(value)


def parse_source(value: str) -> str:
    """The source is sent verbatim, so it must be encodable as UTF-8."""
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        raise InvalidSourceError(f"source must be valid UTF-8 text, got {value!r}") from None
    return value


def connect(host: str, port: int, timeout: Optional[float] = None) -> socket.socket:
    """Resolve ``host:port`` and open one stream connection.

    ``timeout=None`` leaves the socket in blocking mode for both connect and
    writes. Resolution and connection failures raise
    :class:`EmitterConnectionError`.
    """
    try:
        sock = socket.create_connection((host, port), timeout=timeout)
    except OSError as exc:
        logger.debug("connection to %s:%s failed: %s", host, port, exc)
        raise EmitterConnectionError(host, port, exc) from exc
    logger.info("connected to %s:%s", host, port)
    return sock


def emit(sock: socket.socket, encoder: Encoder, count: int, source: str = DEFAULT_SOURCE) -> EmitStats:
    """Write ``count`` independently encoded records to ``sock``, in index order.

    Each record is sent with one full-buffer blocking write; nothing is read
    back. A failed write raises :class:`EmitterWriteError` with the index of
    the record that could not be sent.
    """
    stats = EmitStats()
    for index in range(count):
        data = encoder.encode(build_record(index, source))
        try:
            sock.sendall(data)
        except OSError as exc:
            logger.debug("write %d of %d failed: %s", index, count, exc)
            raise EmitterWriteError(index, exc, sent=stats.messages) from exc
        stats.messages += 1
        stats.bytes_sent += len(data)
        logger.debug("sent message %d (%d bytes)", index, len(data))
    return stats


def run(config: EmitterConfig) -> EmitStats:
    """Connect, emit ``config.count`` records and close the connection."""
    encoder = get_encoder(config.encoding)
    count = parse_count(config.count)
    timeout = parse_timeout(config.timeout)
    source = parse_source(config.source)
    with connect(config.host, config.port, timeout=timeout) as sock:
        stats = emit(sock, encoder, count, source)
    logger.info(
        "sent %d %s message(s), %d bytes, to %s:%s",
        stats.messages,
        encoder.name,
        stats.bytes_sent,
        config.host,
        config.port,
    )
    return stats
