from __future__ import annotations

import pytest

from src.emitter.record import EchoRecord, build_record, iter_records


def test_build_record_shape():
    record = build_record(7)

    assert record.as_dict() == {
        "id": 42,
        "source": "service",
        "parent": {"child": "item"},
        "message": "le message - 7",
    }
    assert list(record.as_dict()) == ["id", "source", "parent", "message"]


def test_build_record_custom_source():
    record = build_record(0, source="bench")

    assert record.source == "bench"
    assert record.message == "le message - 0"


def test_build_record_rejects_negative_index():
    with pytest.raises(ValueError):
        build_record(-1)


def test_records_do_not_share_parent():
    first, second = build_record(0), build_record(1)
    first.as_dict()["parent"]["child"] = "changed"

    assert first.parent is not second.parent
    assert first.as_dict()["parent"] == {"child": "item"}


def test_iter_records_ascending():
    records = list(iter_records(4))

    assert [r.index for r in records] == [0, 1, 2, 3]
    assert all(isinstance(r, EchoRecord) for r in records)
    assert list(iter_records(0)) == []

