"""Wire encodings for the Echo Record.

Two interchangeable encodings are available at runtime:

- ``text``: compact UTF-8 JSON, one object per write and no delimiter,
- ``msgpack``: a MessagePack map with four entries and one nested map.

Each encoder also hands out a streaming decoder for its own format so the
sink (and the tests) can turn a byte stream back into records.
"""

from __future__ import annotations

import codecs
import json
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, List, Mapping, Union

import msgpack

from .errors import DecodeError, UnknownEncodingError
from .record import EchoRecord

RecordLike = Union[EchoRecord, Mapping[str, Any]]


def _as_mapping(record: RecordLike) -> Mapping[str, Any]:
    if isinstance(record, EchoRecord):
        return record.as_dict()
    return record


class StreamDecoder(ABC):
    """Incremental decoder: feed arbitrary chunks, collect complete objects."""

    @abstractmethod
    def feed(self, chunk: bytes) -> List[Dict[str, Any]]:
        ...

    def pending(self) -> bool:
        """True while a partial object is buffered."""
        return False


class Encoder(ABC):
    name: str = ""

    @abstractmethod
    def encode(self, record: RecordLike) -> bytes:
        ...

    @abstractmethod
    def decoder(self) -> StreamDecoder:
        ...

    def decode(self, data: bytes) -> Dict[str, Any]:
        """Decode exactly one object from ``data``."""
        decoder = self.decoder()
        objects = decoder.feed(data)
        if len(objects) != 1 or decoder.pending():
            raise DecodeError(f"expected exactly one {self.name} object, got {len(objects)}")
        return objects[0]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


# -----------------------------
# Text (JSON)
# -----------------------------

class TextStreamDecoder(StreamDecoder):
    """Split back-to-back JSON objects without relying on a delimiter.

    Tracks brace depth outside of string literals; whitespace between objects
    is skipped, anything else outside an object is rejected.
    """

    def __init__(self) -> None:
        self._utf8 = codecs.getincrementaldecoder("utf-8")()
        self._buf = ""
        self._depth = 0
        self._in_string = False
        self._escaped = False
        self._scan_pos = 0

    def pending(self) -> bool:
        return bool(self._buf.strip())

    def feed(self, chunk: bytes) -> List[Dict[str, Any]]:
        try:
            self._buf += self._utf8.decode(chunk)
        except UnicodeDecodeError as exc:
            raise DecodeError(f"invalid utf-8 in text stream: {exc}") from exc

        objects: List[Dict[str, Any]] = []
        pos = self._scan_pos
        start = 0
        buf = self._buf
        while pos < len(buf):
            ch = buf[pos]
            if self._in_string:
                if self._escaped:
                    self._escaped = False
                elif ch == "\\":
                    self._escaped = True
                elif ch == '"':
                    self._in_string = False
            elif self._depth == 0:
                if ch.isspace():
                    start = pos + 1
                elif ch == "{":
                    start = pos
                    self._depth = 1
                else:
                    raise DecodeError(f"unexpected {ch!r} between JSON objects")
            elif ch == '"':
                self._in_string = True
            elif ch == "{":
                self._depth += 1
            elif ch == "}":
                self._depth -= 1
                if self._depth == 0:
                    objects.append(self._load(buf[start:pos + 1]))
                    start = pos + 1
            pos += 1

        self._buf = buf[start:]
        self._scan_pos = pos - start
        return objects

    @staticmethod
    def _load(text: str) -> Dict[str, Any]:
        try:
            obj = json.loads(text)
        except json.JSONDecodeError as exc:
            raise DecodeError(f"malformed JSON object: {exc}") from exc
        if not isinstance(obj, dict):
            raise DecodeError(f"expected a JSON object, got {type(obj).__name__}")
        return obj


class TextEncoder(Encoder):
    name = "text"

    def encode(self, record: RecordLike) -> bytes:
        return json.dumps(_as_mapping(record), separators=(",", ":"), ensure_ascii=False).encode("utf-8")

    def decoder(self) -> StreamDecoder:
        return TextStreamDecoder()


# -----------------------------
# Binary map (MessagePack)
# -----------------------------

class MsgpackStreamDecoder(StreamDecoder):
    def __init__(self) -> None:
        self._unpacker = msgpack.Unpacker(raw=False)
        self._fed = 0
        self._partial = False

    def pending(self) -> bool:
        return self._partial

    def feed(self, chunk: bytes) -> List[Dict[str, Any]]:
        self._unpacker.feed(chunk)
        self._fed += len(chunk)
        objects: List[Dict[str, Any]] = []
        try:
            for obj in self._unpacker:
                if not isinstance(obj, dict):
                    raise DecodeError(f"expected a msgpack map, got {type(obj).__name__}")
                objects.append(obj)
        except (ValueError, msgpack.exceptions.UnpackException) as exc:
            if isinstance(exc, DecodeError):
                raise
            raise DecodeError(f"malformed msgpack data: {exc}") from exc
        self._partial = self._unpacker.tell() < self._fed
        return objects


class BinaryMapEncoder(Encoder):
    """MessagePack encoder that reuses one packer buffer across records."""

    name = "msgpack"

    def __init__(self) -> None:
        self._packer = msgpack.Packer(autoreset=False, use_bin_type=True)

    def encode(self, record: RecordLike) -> bytes:
        self._packer.pack(dict(_as_mapping(record)))
        try:
            return self._packer.bytes()
        finally:
            self._packer.reset()

    def decoder(self) -> StreamDecoder:
        return MsgpackStreamDecoder()


ENCODERS = {
    TextEncoder.name: TextEncoder,
    BinaryMapEncoder.name: BinaryMapEncoder,
}


def get_encoder(name: str) -> Encoder:
    """Return a fresh encoder for ``name`` (``text`` or ``msgpack``)."""
    try:
        factory = ENCODERS[name]
    except KeyError:
        choices = ", ".join(sorted(ENCODERS))
        raise UnknownEncodingError(f"unknown encoding {name!r} (choose from {choices})") from None
    return factory()


def iter_decoded(encoder: Encoder, chunks: Iterator[bytes]) -> Iterator[Dict[str, Any]]:
    """Decode a sequence of byte chunks with ``encoder``'s stream decoder."""
    decoder = encoder.decoder()
    for chunk in chunks:
        yield from decoder.feed(chunk)
    if decoder.pending():
        raise DecodeError(f"stream ended inside a {encoder.name} object")
