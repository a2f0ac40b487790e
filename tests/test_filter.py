"""Behaviour of the in-memory filter."""

import threading

import pytest

from bloomcore import Filter


def test_added_elements_are_found() -> None:
    bloom = Filter(100, 0.01)
    bloom.add("one")
    bloom.add("two")

    assert bloom.contains("one")
    assert bloom.contains("two")
    assert "one" in bloom


def test_no_false_negatives() -> None:
    bloom = Filter(1000, 0.01)
    keys = [f"key{i}" for i in range(1000)]
    for key in keys:
        bloom.add(key)

    for key in keys:
        assert bloom.contains(key), f"False negative for {key}"


def test_false_positive_rate_near_target() -> None:
    bloom = Filter(1000, 0.01)
    bloom.update(f"member-{i}" for i in range(1000))

    probes = 20_000
    false_positives = sum(1 for i in range(probes) if bloom.contains(f"stranger-{i}"))

    assert false_positives / probes <= 0.01 * 2.5


def test_add_reports_new_bits_once() -> None:
    bloom = Filter(100, 0.01)
    assert bloom.add("duplicate") is True
    assert bloom.add("duplicate") is False


def test_update_counts_elements_that_set_bits() -> None:
    bloom = Filter(100, 0.01)
    assert bloom.update(["a", "b", "a"]) == 2


def test_empty_filter_contains_nothing() -> None:
    bloom = Filter(100, 0.01)
    assert bloom.bit_count() == 0
    for key in ["one", "two", "", "three"]:
        assert not bloom.contains(key)


def test_empty_string_is_a_valid_element() -> None:
    bloom = Filter(10, 0.1)
    assert bloom.add("")
    assert bloom.contains("")


def test_unicode_elements_are_utf8_encoded() -> None:
    bloom = Filter(10, 0.1)
    bloom.add("ünïcødé ✓")
    assert bloom.positions("ünïcødé ✓") == bloom.positions("ünïcødé ✓")
    assert bloom.contains("ünïcødé ✓")


def test_clear_resets_bits_but_keeps_parameters() -> None:
    bloom = Filter(100, 0.01)
    bloom.update(["one", "two", "three"])
    assert bloom.bit_count() > 0

    bloom.clear()

    assert bloom.bit_count() == 0
    assert not bloom.contains("one")
    assert (bloom.capacity, bloom.hash_count) == (959, 7)
    assert (bloom.expected_elements, bloom.error_rate) == (100, 0.01)
    assert bloom.add("one")


def test_bit_vector_length_matches_capacity() -> None:
    bloom = Filter.with_capacity(10, 3)
    bloom.update(str(i) for i in range(50))

    assert len(bloom.bits) == 2
    assert len(bloom.to_bits()) == 10
    assert bloom.bits[1] >> 2 == 0
    assert bloom.bit_count() == sum(bloom.to_bits())
    assert 0.0 < bloom.fill_ratio() <= 1.0


def test_string_representation() -> None:
    bloom = Filter(100, 0.01)
    assert str(bloom) == "Capacity:959,Hashes:7,ExpectedElements:100,ErrorRate:0.01"


def test_dispose_is_idempotent() -> None:
    with Filter(100, 0.01) as bloom:
        bloom.add("one")
    bloom.dispose()
    bloom.dispose()
    assert bloom.contains("one")


def test_from_bits_restores_state() -> None:
    original = Filter(100, 0.01)
    original.update(["one", "two"])

    restored = Filter.from_bits(
        original.bits,
        original.capacity,
        original.hash_count,
        expected_elements=original.expected_elements,
        error_rate=original.error_rate,
    )

    assert restored.bits == original.bits
    assert str(restored) == str(original)
    assert restored.contains("one")


def test_from_bits_masks_padding_bits() -> None:
    restored = Filter.from_bits(b"\xff\xff", 10, 2)
    assert restored.bits == b"\xff\x03"
    assert restored.bit_count() == 10


def test_from_bits_rejects_wrong_length() -> None:
    with pytest.raises(ValueError):
        Filter.from_bits(b"\x00", 10, 2)


def test_concurrent_adds_lose_nothing() -> None:
    bloom = Filter(20_000, 0.01)
    workers = 8
    per_worker = 1000
    barrier = threading.Barrier(workers)

    def insert(worker: int) -> None:
        barrier.wait()
        for index in range(per_worker):
            bloom.add(f"w{worker}-{index}")

    threads = [threading.Thread(target=insert, args=(w,)) for w in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    for worker in range(workers):
        for index in range(per_worker):
            assert bloom.contains(f"w{worker}-{index}")


def test_clear_is_atomic_with_readers() -> None:
    bloom = Filter(500, 0.01)
    keys = [f"k{i}" for i in range(500)]
    bloom.update(keys)
    stop = threading.Event()
    counts = []

    def observe() -> None:
        while not stop.is_set():
            counts.append(bloom.bit_count())

    reader = threading.Thread(target=observe)
    reader.start()
    full = bloom.bit_count()
    bloom.clear()
    stop.set()
    reader.join()

    assert set(counts) <= {full, 0}
