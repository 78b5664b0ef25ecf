"""The Echo Record: the fixed payload sent to the target endpoint.

Every record carries the same ``id``, ``source`` and ``parent`` values; only
the ``message`` changes, ending in the index of the write that carries it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator

RECORD_ID = 42
DEFAULT_SOURCE = "service"
MESSAGE_PREFIX = "le message - "


def _default_parent() -> Dict[str, str]:
    return {"child": "item"}


@dataclass(frozen=True, slots=True)
class EchoRecord:
    index: int
    source: str = DEFAULT_SOURCE
    id: int = RECORD_ID
    parent: Dict[str, str] = field(default_factory=_default_parent)

    @property
    def message(self) -> str:
        return f"{MESSAGE_PREFIX}{self.index}"

    def as_dict(self) -> Dict[str, Any]:
        # key order is part of the wire shape
        return {
            "id": self.id,
            "source": self.source,
            "parent": dict(self.parent),
            "message": self.message,
        }


def build_record(index: int, source: str = DEFAULT_SOURCE) -> EchoRecord:
    """Return the record for write number ``index``.

    Raises :class:`ValueError` for a negative index.
    """
    if index < 0:
        raise ValueError(f"record index must be non-negative, got {index}")
    return EchoRecord(index=index, source=source)


def iter_records(count: int, source: str = DEFAULT_SOURCE) -> Iterator[EchoRecord]:
    """Yield one record per index in ``[0, count)``, in ascending order."""
    for index in range(count):
        yield build_record(index, source)

