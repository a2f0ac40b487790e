"""Thread-safe in-memory Bloom filter backed by a packed bit vector."""

import threading
from typing import Iterable, List, Optional

from loguru import logger

from bloomcore.errors import FilterParameterError
from bloomcore.hashing import compute_hash
from bloomcore.params import (
    best_capacity,
    best_error_rate,
    best_expected_elements,
    best_hash_count,
    clamp_error_rate,
    validate_rate_parameters,
    validate_size_parameters,
)


def packed_length(bit_length: int) -> int:
    """Number of bytes needed to hold ``bit_length`` bits."""
    return (bit_length + 7) // 8


class Filter:
    """Bloom filter with a fixed capacity chosen at construction.

    Build it either from the expected load and the tolerated error rate::

        Filter(expected_elements=100, error_rate=0.01)

    or from an explicit geometry, in which case the expected load and error
    rate are back-derived once::

        Filter.with_capacity(capacity=959, hash_count=7)

    ``add``, ``contains`` and ``clear`` serialise on a single per-instance
    lock. Hash positions are computed before the lock is taken.
    """

    def __init__(
        self,
        expected_elements: Optional[int] = None,
        error_rate: Optional[float] = None,
        *,
        capacity: Optional[int] = None,
        hash_count: Optional[int] = None,
    ) -> None:
        rated = expected_elements is not None or error_rate is not None
        sized = capacity is not None or hash_count is not None
        if rated == sized:
            raise TypeError(
                "Filter takes either (expected_elements, error_rate) or (capacity, hash_count)"
            )

        if rated:
            if expected_elements is None or error_rate is None:
                raise TypeError("expected_elements and error_rate must be given together")
            validate_rate_parameters(expected_elements, error_rate)
            self._expected_elements = expected_elements
            self._error_rate = error_rate
            self._capacity = best_capacity(expected_elements, error_rate)
            self._hash_count = best_hash_count(expected_elements, self._capacity)
        else:
            if capacity is None or hash_count is None:
                raise TypeError("capacity and hash_count must be given together")
            validate_size_parameters(capacity, hash_count)
            self._capacity = capacity
            self._hash_count = hash_count
            self._expected_elements = best_expected_elements(hash_count, capacity)
            self._error_rate = clamp_error_rate(
                best_error_rate(hash_count, capacity, self._expected_elements)
            )

        self._lock = threading.Lock()
        self._bits = bytearray(packed_length(self._capacity))
        logger.debug("Allocated bloom filter {}", self)

    @classmethod
    def with_capacity(cls, capacity: int, hash_count: int) -> "Filter":
        return cls(capacity=capacity, hash_count=hash_count)

    @classmethod
    def from_bits(
        cls,
        packed: bytes,
        capacity: int,
        hash_count: int,
        *,
        expected_elements: Optional[int] = None,
        error_rate: Optional[float] = None,
    ) -> "Filter":
        """Rebuild a filter around an existing packed bit vector.

        ``expected_elements`` and ``error_rate`` restore the values recorded
        when the filter was persisted; missing ones are back-derived.
        """
        instance = cls.with_capacity(capacity, hash_count)
        if len(packed) != len(instance._bits):
            raise FilterParameterError(
                "packed",
                len(packed),
                f"packed bit vector must be {len(instance._bits)} bytes for capacity {capacity}",
            )
        if expected_elements is not None or error_rate is not None:
            validate_rate_parameters(
                expected_elements if expected_elements is not None else instance._expected_elements,
                error_rate if error_rate is not None else instance._error_rate,
            )
            if expected_elements is not None:
                instance._expected_elements = expected_elements
            if error_rate is not None:
                instance._error_rate = error_rate

        instance._bits[:] = packed
        tail = capacity % 8
        if tail:
            instance._bits[-1] &= (1 << tail) - 1
        return instance

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def hash_count(self) -> int:
        return self._hash_count

    @property
    def expected_elements(self) -> int:
        return self._expected_elements

    @property
    def error_rate(self) -> float:
        return self._error_rate

    @property
    def bits(self) -> bytes:
        """Consistent snapshot of the packed bit vector."""
        with self._lock:
            return bytes(self._bits)

    def positions(self, element: str) -> List[int]:
        return compute_hash(self._to_bytes(element), self._capacity, self._hash_count)

    def add(self, element: str) -> bool:
        """Insert ``element``.

        Returns True when at least one bit flipped from 0 to 1. A False
        result means the element already looked present, which may be a
        collision rather than a real duplicate.
        """
        positions = self.positions(element)
        added = False
        with self._lock:
            for position in positions:
                byte_index = position >> 3
                mask = 1 << (position & 7)
                if not self._bits[byte_index] & mask:
                    self._bits[byte_index] |= mask
                    added = True
        return added

    def update(self, elements: Iterable[str]) -> int:
        """Insert every element, returning how many of them set new bits."""
        return sum(1 for element in elements if self.add(element))

    def contains(self, element: str) -> bool:
        """False means definitely absent; True means possibly present."""
        positions = self.positions(element)
        with self._lock:
            for position in positions:
                if not self._bits[position >> 3] & (1 << (position & 7)):
                    return False
        return True

    def __contains__(self, element: str) -> bool:
        return self.contains(element)

    def clear(self) -> None:
        with self._lock:
            self._bits[:] = bytes(len(self._bits))

    def bit_count(self) -> int:
        """Number of bits currently set."""
        with self._lock:
            return sum(bin(byte).count("1") for byte in self._bits)

    def fill_ratio(self) -> float:
        return self.bit_count() / self._capacity

    def to_bits(self) -> List[bool]:
        packed = self.bits
        return [bool(packed[i >> 3] & (1 << (i & 7))) for i in range(self._capacity)]

    def dispose(self) -> None:
        # Nothing to release; the bit vector lives in process memory.
        pass

    def __enter__(self) -> "Filter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()

    def _to_bytes(self, element: str) -> bytes:
        return element.encode("utf-8")

    def __str__(self) -> str:
        return (
            f"Capacity:{self._capacity},Hashes:{self._hash_count},"
            f"ExpectedElements:{self._expected_elements},ErrorRate:{self._error_rate}"
        )

    def __repr__(self) -> str:
        return f"<Filter {self}>"
