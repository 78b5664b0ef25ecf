import threading

import pytest

from src.emitter.client import EmitterConfig, run
from src.emitter.errors import DecodeError
from src.emitter.record import MESSAGE_PREFIX
from src.io.sink import read_records, serve


def message_index(message):
    assert message.startswith(MESSAGE_PREFIX), message
    return int(message[len(MESSAGE_PREFIX):])


def start_sink_in_thread(encoding, limit=None):
    ready = threading.Event()
    state = {}

    def _ready(addr):
        state["addr"] = addr
        ready.set()

    def _serve():
        try:
            state["records"] = serve("127.0.0.1", 0, encoding=encoding, limit=limit, timeout=5.0, on_ready=_ready)
        except Exception as exc:  # surfaced through state for the assertions
            state["error"] = exc
            ready.set()

    t = threading.Thread(target=_serve, daemon=True)
    t.start()
    assert ready.wait(5.0)
    return t, state


@pytest.mark.parametrize("encoding", ["text", "msgpack"])
def test_emitter_to_sink(encoding):
    t, state = start_sink_in_thread(encoding)
    host, port = state["addr"]

    run(EmitterConfig(host=host, port=port, count=10, encoding=encoding))
    t.join(5.0)

    assert "error" not in state
    received = state["records"]
    assert len(received) == 10
    assert [message_index(item["message"]) for item in received] == list(range(10))
    assert {item["id"] for item in received} == {42}


def test_sink_limit_stops_early():
    t, state = start_sink_in_thread("text", limit=3)
    host, port = state["addr"]

    run(EmitterConfig(host=host, port=port, count=3))
    t.join(5.0)

    assert [r["message"] for r in state["records"]] == [f"le message - {i}" for i in range(3)]


class _FakeConn:
    def __init__(self, chunks):
        self._chunks = list(chunks)

    def recv(self, bufsize):
        return self._chunks.pop(0) if self._chunks else b""


def test_read_records_drops_records_without_message(caplog):
    conn = _FakeConn([b'{"id":1}{"id":2,"message":"kept"}'])

    records = list(read_records(conn, "text"))

    assert records == [{"id": 2, "message": "kept"}]
    assert "message field required" in caplog.text


def test_read_records_truncated_record_raises():
    conn = _FakeConn([b'{"id":1,"message":"cut'])

    with pytest.raises(DecodeError):
        list(read_records(conn, "text"))
