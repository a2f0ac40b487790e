"""Murmur3 based position expansion.

Two 32-bit Murmur3 hashes are combined with the Kirsch-Mitzenmacher
double-hashing scheme (plus a quadratic term) to derive any number of bit
positions from a single pass over the input. The arithmetic is pinned to
32-bit unsigned words so that positions stay stable across processes and
persisted filters.
"""

from typing import List

import mmh3

UINT32_MASK = 0xFFFFFFFF
_SIGN_MASK = 0x7FFFFFFF


def right_move(value: int, pos: int) -> int:
    """Unsigned right shift of a 32-bit word by ``pos``.

    The first step shifts by one and clears the top bit, so the result is
    always a non-negative 31-bit value for ``pos >= 1``.
    """
    value &= UINT32_MASK
    if pos != 0:
        value >>= 1
        value &= _SIGN_MASK
        value >>= pos - 1
    return value


def base_hashes(data: bytes) -> tuple[int, int]:
    """Return the two unsigned seed hashes ``(h1, h2)`` for ``data``."""
    h1 = mmh3.hash(data, 0, signed=False)
    # h1 doubles as the seed of h2 so the pair is decorrelated.
    h2 = mmh3.hash(data, h1, signed=False)
    return h1, h2


def compute_hash(data: bytes, capacity: int, hash_count: int) -> List[int]:
    """Map ``data`` to ``hash_count`` positions in ``[0, capacity)``.

    Positions may repeat. An empty ``data`` is hashed like any other input.
    """
    h1, h2 = base_hashes(data)
    positions: List[int] = []
    for i in range(hash_count):
        combined = (h1 + i * h2 + i * i) & UINT32_MASK
        positions.append(right_move(combined, 1) % capacity)
    return positions
