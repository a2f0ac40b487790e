"""Whole-filter JSON documents."""

import json

import pytest
from pydantic import ValidationError

from bloomcore import DecompressionError, Filter
from bloomcore.serialization import dumps, loads


def _sample() -> Filter:
    bloom = Filter(100, 0.01)
    bloom.add("one")
    bloom.add("two")
    return bloom


def test_document_fields() -> None:
    data = json.loads(dumps(_sample()))

    assert data["Capacity"] == 959
    assert data["Hashes"] == 7
    assert data["ExpectedElements"] == 100
    assert data["ErrorRate"] == 0.01
    assert set(data["HashBits"]) == {"b", "l"}
    assert data["HashBits"]["l"] == 959


def test_round_trip() -> None:
    bloom = _sample()

    restored = loads(dumps(bloom))

    assert restored.contains("one")
    assert restored.contains("two")
    assert restored.bits == bloom.bits
    assert str(restored) == str(bloom)


def test_string_bits_round_trip() -> None:
    bloom = _sample()

    text = dumps(bloom, string_bits=True)
    data = json.loads(text)
    restored = loads(text)

    assert len(data["HashBits"]) == 959
    assert set(data["HashBits"]) <= {"0", "1"}
    assert data["HashBits"].count("1") == bloom.bit_count()
    assert restored.bits == bloom.bits


def test_length_must_match_capacity() -> None:
    data = json.loads(dumps(Filter.with_capacity(10, 2)))
    data["Capacity"] = 11
    with pytest.raises(DecompressionError):
        loads(json.dumps(data))


def test_bit_string_rejects_other_characters() -> None:
    data = json.loads(dumps(Filter.with_capacity(4, 2), string_bits=True))
    data["HashBits"] = "01x1"
    with pytest.raises(DecompressionError):
        loads(json.dumps(data))


def test_invalid_parameters_fail_validation() -> None:
    data = json.loads(dumps(Filter.with_capacity(10, 2)))
    data["ErrorRate"] = 1.5
    with pytest.raises(ValidationError):
        loads(json.dumps(data))


@pytest.mark.parametrize(
    ("capacity", "hash_count"),
    [(10, 1100), (1_000_000, 5000), (1, 1)],
)
def test_degenerate_geometries_round_trip(capacity: int, hash_count: int) -> None:
    bloom = Filter.with_capacity(capacity, hash_count)
    bloom.add("one")

    restored = loads(dumps(bloom))

    assert restored.error_rate == bloom.error_rate
    assert restored.expected_elements == bloom.expected_elements
    assert restored.bits == bloom.bits
