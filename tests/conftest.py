"""Pytest configuration to ensure project packages are importable."""

from __future__ import annotations

import socket
import sys
import threading
from pathlib import Path
from typing import Iterator, List

import pytest

_PROJECT_ROOT = Path(__file__).resolve().parents[1]

# Prepend the project root so tests can import `src.emitter` and `src.io`.
_str_root = str(_PROJECT_ROOT)
if _str_root not in sys.path:
    sys.path.insert(0, _str_root)


class Listener:
    """Loopback TCP listener that records every connection's raw bytes."""

    def __init__(self) -> None:
        self._srv = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._srv.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._srv.bind(("127.0.0.1", 0))
        self._srv.listen(4)
        self._srv.settimeout(5.0)
        self.port = self._srv.getsockname()[1]
        self.connections: List[bytes] = []
        self._thread = threading.Thread(target=self._accept_one, daemon=True)
        self._thread.start()

    def _accept_one(self) -> None:
        try:
            conn, _ = self._srv.accept()
        except OSError:
            return
        with conn:
            conn.settimeout(5.0)
            buf = b""
            while True:
                chunk = conn.recv(4096)
                if not chunk:
                    break
                buf += chunk
        self.connections.append(buf)

    def wait(self, timeout: float = 5.0) -> None:
        self._thread.join(timeout)

    @property
    def received(self) -> bytes:
        self.wait()
        return b"".join(self.connections)

    def close(self) -> None:
        self._srv.close()
        self._thread.join(1.0)


@pytest.fixture
def listener() -> Iterator[Listener]:
    lst = Listener()
    yield lst
    lst.close()


@pytest.fixture
def closed_port() -> int:
    """A loopback port with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]
