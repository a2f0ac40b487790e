"""Thread-safe Bloom filter with Murmur3 position expansion and a compact codec."""

from bloomcore.errors import (
    BloomFilterError,
    CodecError,
    CompressionError,
    DecompressionError,
    FilterParameterError,
)
from bloomcore.filter import Filter
from bloomcore.params import (
    best_capacity,
    best_error_rate,
    best_expected_elements,
    best_hash_count,
)

__all__ = [
    "BloomFilterError",
    "CodecError",
    "CompressionError",
    "DecompressionError",
    "Filter",
    "FilterParameterError",
    "best_capacity",
    "best_error_rate",
    "best_expected_elements",
    "best_hash_count",
]
