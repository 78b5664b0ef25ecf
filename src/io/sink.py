import socket
import logging
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from ..emitter.encoders import get_encoder
from ..emitter.errors import DecodeError

logger = logging.getLogger(__name__)

Address = Tuple[str, int]


def read_records(
    conn: socket.socket,
    encoding: str = "text",
    limit: Optional[int] = None,
    bufsize: int = 4096,
) -> Iterator[Dict[str, Any]]:
    """Decode records from a connected socket and yield them as dicts.

    Behaviour and parameters:
    - conn: an accepted (or connected) stream socket.
    - encoding: ``text`` for back-to-back JSON objects, ``msgpack`` for a
      stream of MessagePack maps.
    - limit: optional max number of records to yield (None = until EOF).
    - bufsize: size of each recv() call.

    Records without a ``message`` field are dropped with a warning.

    Errors:
        Raises DecodeError on malformed input or when the peer closes the
        connection in the middle of a record.
    """
    decoder = get_encoder(encoding).decoder()
    remaining = limit
    if remaining is not None and remaining <= 0:
        return

    while True:
        chunk = conn.recv(bufsize)
        if not chunk:
            logger.debug("connection closed by peer")
            break
        for record in decoder.feed(chunk):
            if "message" not in record:
                logger.warning("dropping %r: message field required", record)
                continue
            yield record
            if remaining is not None:
                remaining -= 1
                if remaining <= 0:
                    return

    if decoder.pending():
        raise DecodeError(f"connection closed inside a {encoding} record")


def serve(
    host: str = "127.0.0.1",
    port: int = 0,
    encoding: str = "text",
    limit: Optional[int] = None,
    timeout: Optional[float] = 10.0,
    on_ready: Optional[Callable[[Address], None]] = None,
    on_record: Optional[Callable[[Dict[str, Any]], None]] = None,
) -> List[Dict[str, Any]]:
    """Accept a single connection and collect the records it sends.

    ``port=0`` binds an ephemeral port; ``on_ready`` receives the bound
    address once the socket is listening. ``timeout`` applies to accept and
    to each recv (None blocks forever).
    """
    get_encoder(encoding)  # fail fast on an unknown encoding
    records: List[Dict[str, Any]] = []
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as srv:
        srv.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        srv.bind((host, port))
        srv.listen(1)
        addr = srv.getsockname()[:2]
        logger.info("sink listening on %s:%s (%s)", addr[0], addr[1], encoding)
        if on_ready is not None:
            on_ready(addr)
        srv.settimeout(timeout)
        conn, peer = srv.accept()
        with conn:
            conn.settimeout(timeout)
            logger.debug("connection accepted from %s", peer)
            for record in read_records(conn, encoding, limit=limit):
                records.append(record)
                if on_record is not None:
                    on_record(record)
    logger.info("sink received %d record(s)", len(records))
    return records
